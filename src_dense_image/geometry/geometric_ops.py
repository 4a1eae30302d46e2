"""
Geometric transformations of DenseImage.

Transposition, flips, tiling, translation, sub-images, channel averaging
and nearest-neighbour/bilinear resizing. All results are fresh images in the
input's scalar type.
"""

import math

import numpy as np

from ..core.dense_image import DenseImage
from ..core.reductions import mean_along, CHANNELS
from ..filtering.filter_engine import filter2d
from ..kernels.kernel_factory import gaussian
from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)

MIN_SCALE = 0.01
MAX_SCALE = 100.0


def transpose(input_image: DenseImage) -> DenseImage:
    """Swap rows and columns of every channel."""
    if input_image.size == 0:
        return DenseImage(input_image.width, input_image.height, input_image.channels, dtype=input_image.dtype)
    return DenseImage.from_array(np.transpose(input_image.data, (1, 0, 2)))


def flip_lr(input_image: DenseImage) -> DenseImage:
    """Mirror columns (left-right)."""
    if input_image.size == 0:
        return DenseImage.like(input_image, copy_data=False)
    return DenseImage.from_array(input_image.data[:, ::-1, :])


def flip_ud(input_image: DenseImage) -> DenseImage:
    """Mirror rows (up-down)."""
    if input_image.size == 0:
        return DenseImage.like(input_image, copy_data=False)
    return DenseImage.from_array(input_image.data[::-1, :, :])


def repmat(input_image: DenseImage, height: int = 1, width: int = 1, channels: int = 1) -> DenseImage:
    """
    Tile the image ``height x width x channels`` times.

    ``out(i, j, k) = in(i mod H, j mod W, k mod C)``; non-positive repetition
    counts give an empty image.
    """
    if input_image.size == 0 or height <= 0 or width <= 0 or channels <= 0:
        logger.debug(f"repmat: nothing to tile (input {input_image.shape}, counts {(height, width, channels)})")
        return DenseImage(dtype=input_image.dtype)
    return DenseImage.from_array(np.tile(input_image.data, (height, width, channels)))


def shift_image_xy(input_image: DenseImage, columns: int = 0, rows: int = 0) -> DenseImage:
    """
    Translate the image content, filling uncovered pixels with zero.

    ``out(i, j) = in(i - rows, j - columns)`` where the source is inside the
    image. A shift at least as large as the extent gives an all-zero image.

    Args:
        input_image: Image to translate
        columns: Shift to the right (negative: left)
        rows: Shift downwards (negative: upwards)

    Returns:
        DenseImage: Translated image of the input's shape
    """
    result = DenseImage.like(input_image, copy_data=False)
    height, width = input_image.height, input_image.width
    if abs(rows) >= height or abs(columns) >= width:
        return result

    if rows >= 0:
        target_rows, source_rows = slice(rows, height), slice(0, height - rows)
    else:
        target_rows, source_rows = slice(0, height + rows), slice(-rows, height)

    if columns >= 0:
        target_columns, source_columns = slice(columns, width), slice(0, width - columns)
    else:
        target_columns, source_columns = slice(0, width + columns), slice(-columns, width)

    result.data[target_rows, target_columns, :] = input_image.data[source_rows, source_columns, :]
    return result


def get_sub_image(
    input_image: DenseImage,
    row_lo: int = -1,
    row_hi: int = -1,
    column_lo: int = -1,
    column_hi: int = -1,
    channel_lo: int = -1,
    channel_hi: int = -1
) -> DenseImage:
    return input_image.get_sub_image(row_lo, row_hi, column_lo, column_hi, channel_lo, channel_hi)


def rgb2gray(input_image: DenseImage) -> DenseImage:
    """Average the channels into one."""
    return mean_along(input_image, CHANNELS)


def _valid_scale(scale: float, name: str) -> bool:
    if not MIN_SCALE <= scale <= MAX_SCALE:
        logger.debug(f"{name}: scale {scale} outside [{MIN_SCALE}, {MAX_SCALE}]")
        return False
    return True


def _resample_source(input_image: DenseImage, scale: float, pre_smooth: bool) -> DenseImage:
    """Low-pass the input before shrinking, to limit aliasing."""
    if pre_smooth and scale < 1:
        kernel = gaussian(int(math.ceil(3 / scale)), 1 / scale)
        return filter2d(kernel, input_image)
    return input_image


def resize_nearest_nbr(input_image: DenseImage, scale: float, pre_smooth: bool = False) -> DenseImage:
    """
    Resize by nearest-neighbour sampling.

    Output pixel ``i`` samples source index ``floor(i / scale + 0.5)``,
    clamped to the last row/column.

    Args:
        input_image: Image to resize
        scale: Scale factor in [0.01, 100]
        pre_smooth: Gaussian-smooth the input first when shrinking

    Returns:
        DenseImage: ``floor(H*scale) x floor(W*scale) x C`` image; empty for
        an out-of-range scale
    """
    if not _valid_scale(scale, 'resize_nearest_nbr'):
        return DenseImage(dtype=input_image.dtype)

    height, width, channels = input_image.shape
    result = DenseImage(int(math.floor(height * scale)), int(math.floor(width * scale)), channels,
                        dtype=input_image.dtype)
    if result.size == 0:
        return result

    rows = np.minimum(np.floor(np.arange(result.height) / scale + 0.5).astype(int), height - 1)
    cols = np.minimum(np.floor(np.arange(result.width) / scale + 0.5).astype(int), width - 1)

    source = _resample_source(input_image, scale, pre_smooth)
    np.copyto(result.data, source.data[rows[:, np.newaxis], cols[np.newaxis, :], :], casting='unsafe')
    return result


def resize_bilinear(input_image: DenseImage, scale: float, pre_smooth: bool = False) -> DenseImage:
    """
    Resize by bilinear interpolation.

    Interpolates first along rows between source rows ``int(i / scale)`` and
    ``int(i / scale + 1)``, then along columns. Neighbours past the last
    row/column are clamped to it. See ``resize_nearest_nbr`` for the
    arguments.
    """
    if not _valid_scale(scale, 'resize_bilinear'):
        return DenseImage(dtype=input_image.dtype)

    height, width, channels = input_image.shape
    result = DenseImage(int(math.floor(height * scale)), int(math.floor(width * scale)), channels,
                        dtype=input_image.dtype)
    if result.size == 0:
        return result

    def _neighbours(count: int, extent: int):
        coords = np.arange(count) / scale
        lo = coords.astype(int)
        hi = (coords + 1).astype(int)
        weight_lo = hi - coords
        weight_hi = coords - lo
        return np.minimum(lo, extent - 1), np.minimum(hi, extent - 1), weight_lo, weight_hi

    row_lo, row_hi, row_weight_lo, row_weight_hi = _neighbours(result.height, height)
    col_lo, col_hi, col_weight_lo, col_weight_hi = _neighbours(result.width, width)

    source = _resample_source(input_image, scale, pre_smooth).data
    row_weight_lo = row_weight_lo[:, np.newaxis, np.newaxis]
    row_weight_hi = row_weight_hi[:, np.newaxis, np.newaxis]

    with np.errstate(all='ignore'):
        # intermediate rows take the image's scalar type before the column pass
        left = (row_weight_lo * source[row_lo][:, col_lo] + row_weight_hi * source[row_hi][:, col_lo])
        right = (row_weight_lo * source[row_lo][:, col_hi] + row_weight_hi * source[row_hi][:, col_hi])
        left = left.astype(source.dtype)
        right = right.astype(source.dtype)
        values = (col_weight_lo[np.newaxis, :, np.newaxis] * left
                  + col_weight_hi[np.newaxis, :, np.newaxis] * right)
        np.copyto(result.data, values, casting='unsafe')
    return result
