"""
Geometric transformations: transpose, flips, tiling, shifts and resizing.
"""

from .geometric_ops import (
    transpose, flip_lr, flip_ud, repmat, shift_image_xy, get_sub_image, rgb2gray,
    resize_nearest_nbr, resize_bilinear
)

__all__ = [
    'transpose', 'flip_lr', 'flip_ud', 'repmat', 'shift_image_xy', 'get_sub_image', 'rgb2gray',
    'resize_nearest_nbr', 'resize_bilinear'
]
