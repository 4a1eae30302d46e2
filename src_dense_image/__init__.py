"""
Dense multi-channel image toolkit.

A (height, width, channels) numeric image type with element-wise algebra,
reductions, linear and rank filters, geometric transformations, kernel
factories, a bridge to external image buffers and abstract interfaces for
local matchers and feature detectors.
"""

from .core import DenseImage, have_equal_dimensions, have_equal_height_width
from .bridge import ImageAdapter, OpenCVImageAdapter
from .matching import LocalMatcher, MatcherState
from .features import FeatureDetector

__all__ = [
    'DenseImage', 'have_equal_dimensions', 'have_equal_height_width',
    'ImageAdapter', 'OpenCVImageAdapter',
    'LocalMatcher', 'MatcherState',
    'FeatureDetector',
]
