"""
Adapters between DenseImage and external image types.
"""

from .image_adapter import ImageAdapter, OpenCVImageAdapter

__all__ = ['ImageAdapter', 'OpenCVImageAdapter']
