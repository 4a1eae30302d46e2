"""
Kernel factories (Gaussian, Gabor), coordinate grids and the Gabor phase stack.
"""

from .kernel_factory import gaussian, gabor_x, gabor_y, gabor_oriented, meshgrid_x, meshgrid_y, random
from .gabor_stack import gabor_phase_stack

__all__ = [
    'gaussian', 'gabor_x', 'gabor_y', 'gabor_oriented', 'meshgrid_x', 'meshgrid_y', 'random',
    'gabor_phase_stack'
]
