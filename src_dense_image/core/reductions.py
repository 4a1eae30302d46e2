"""
Reductions of DenseImage: collapsing one dimension, region sums and norms.
"""

from typing import Callable

import numpy as np

from .dense_image import DenseImage, Scalar, resolve_region
from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)

ROWS = 1
COLUMNS = 2
CHANNELS = 3


def _collapse(image: DenseImage, dimension: int, reducer: Callable) -> DenseImage:
    """
    Collapse one dimension of ``image`` to size 1 with ``reducer``.

    Args:
        image: Input image
        dimension: 1 (rows), 2 (columns) or 3 (channels); anything else means 3
        reducer: numpy reduction taking ``axis`` and ``keepdims``

    Returns:
        DenseImage: Result in the input's scalar type; empty for empty input
    """
    if dimension not in (ROWS, COLUMNS, CHANNELS):
        logger.debug(f"Invalid dimension {dimension}, collapsing channels")
        dimension = CHANNELS

    if image.size == 0:
        return DenseImage(dtype=image.dtype)

    height, width, channels = image.shape
    target = {
        ROWS: (1, width, channels),
        COLUMNS: (height, 1, channels),
        CHANNELS: (height, width, 1),
    }[dimension]

    result = DenseImage(*target, dtype=image.dtype)
    if result.shape != target:
        return result

    with np.errstate(all='ignore'):
        values = reducer(image.data, axis=dimension - 1, keepdims=True)
    np.copyto(result.data, values, casting='unsafe')
    return result


def sum_along(image: DenseImage, dimension: int = CHANNELS) -> DenseImage:
    return _collapse(image, dimension, np.sum)


def mean_along(image: DenseImage, dimension: int = CHANNELS) -> DenseImage:
    return _collapse(image, dimension, np.mean)


def min_along(image: DenseImage, dimension: int = CHANNELS) -> DenseImage:
    return _collapse(image, dimension, np.min)


def max_along(image: DenseImage, dimension: int = CHANNELS) -> DenseImage:
    return _collapse(image, dimension, np.max)


def sum_region(
    image: DenseImage,
    row_lo: int = -1,
    row_hi: int = -1,
    column_lo: int = -1,
    column_hi: int = -1,
    channel_lo: int = -1,
    channel_hi: int = -1
) -> Scalar:
    """
    Sum of an inclusive rectangular block.

    A negative lower bound starts at index 0, a negative upper bound ends at
    the last index, and bounds past the extent are clamped to the last index.

    Returns:
        Scalar: The sum in the image's scalar type (0 for an empty region)
    """
    region = resolve_region(image.shape, row_lo, row_hi, column_lo, column_hi, channel_lo, channel_hi)
    if region is None:
        return image.dtype.type(0)
    return image.dtype.type(image.data[region].sum())


def sum_single_channel(image: DenseImage, channel: int) -> Scalar:
    if not 0 <= channel < image.channels:
        logger.debug(f"sum_single_channel: invalid channel {channel} for {image.channels} channels")
        return image.dtype.type(0)
    return sum_region(image, -1, -1, -1, -1, channel, channel)


def sum_all(image: DenseImage) -> Scalar:
    return sum_region(image)


def l1_norm(image: DenseImage) -> Scalar:
    """Sum of absolute values."""
    if image.size == 0:
        return image.dtype.type(0)
    return image.dtype.type(np.abs(image.data).sum())


def l2_norm(image: DenseImage) -> Scalar:
    """Square root of the sum of squares."""
    if image.size == 0:
        return image.dtype.type(0)
    values = image.data.astype(np.float64)
    return image.dtype.type(np.sqrt(np.sum(values * values)))
