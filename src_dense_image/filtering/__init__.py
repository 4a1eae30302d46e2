"""
Linear (convolution/correlation) and rank filters.
"""

from .filter_engine import (
    convolve2d, filter2d, median_filter2d, min_filter2d, max_filter2d, mean_filter2d
)

__all__ = ['convolve2d', 'filter2d', 'median_filter2d', 'min_filter2d', 'max_filter2d', 'mean_filter2d']
