"""
Core image type, element-wise algebra and reductions.
"""

from .dense_image import DenseImage, have_equal_dimensions, have_equal_height_width

__all__ = ['DenseImage', 'have_equal_dimensions', 'have_equal_height_width']
