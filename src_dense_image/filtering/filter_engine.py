"""
Linear and rank filters for DenseImage.

Linear filters use ``scipy.signal.convolve2d`` in ``'full'`` mode and slice
the result to the output alignment, which makes zero padding equivalent to
skipping the taps that fall outside the image. Channel 0 of the kernel is
applied to every channel of the input and results are converted back to the
input's scalar type.

Window convention: for a K-tap axis the window covers offsets
``k - K // 2`` for ``k = 0 .. K-1``.

Rank filters gather the windows of a few rows at a time, so their memory use
does not grow with the image height.
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy import signal

from ..core.dense_image import DenseImage
from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)

# float64 window samples gathered at once by the rank filters
WINDOW_SAMPLE_BUDGET = 1 << 18


def _linear_filter(taps: np.ndarray, input_image: DenseImage, row_offset: int, column_offset: int) -> DenseImage:
    result = DenseImage.like(input_image, copy_data=False)
    height, width = input_image.height, input_image.width

    for k in range(input_image.channels):
        full = signal.convolve2d(input_image.data[:, :, k], taps, mode='full')
        window = full[row_offset:row_offset + height, column_offset:column_offset + width]
        with np.errstate(all='ignore'):
            np.copyto(result.data[:, :, k], window, casting='unsafe')

    return result


def convolve2d(kernel: DenseImage, input_image: DenseImage) -> DenseImage:
    """
    2D convolution with out-of-bounds taps skipped.

    ``out(i, j) = sum kernel(ki, kj) * input(i - (ki - Kh//2), j - (kj - Kw//2))``

    Args:
        kernel: Filter kernel, only channel 0 is used
        input_image: Image to filter, every channel is filtered

    Returns:
        DenseImage: Same shape and scalar type as the input; zero-filled if
        the kernel or the input is empty
    """
    if kernel.size == 0 or input_image.size == 0:
        logger.debug(f"convolve2d: empty operand (kernel {kernel.shape}, input {input_image.shape})")
        return DenseImage.like(input_image, copy_data=False)

    taps = kernel.data[:, :, 0]
    return _linear_filter(taps, input_image, kernel.height // 2, kernel.width // 2)


def filter2d(kernel: DenseImage, input_image: DenseImage) -> DenseImage:
    """
    2D cross-correlation with out-of-bounds taps skipped.

    ``out(i, j) = sum kernel(ki, kj) * input(i + (ki - Kh//2), j + (kj - Kw//2))``

    Args:
        kernel: Filter kernel, only channel 0 is used
        input_image: Image to filter, every channel is filtered

    Returns:
        DenseImage: Same shape and scalar type as the input; zero-filled if
        the kernel or the input is empty
    """
    if kernel.size == 0 or input_image.size == 0:
        logger.debug(f"filter2d: empty operand (kernel {kernel.shape}, input {input_image.shape})")
        return DenseImage.like(input_image, copy_data=False)

    # correlation is convolution with the flipped kernel, aligned on the
    # flipped midpoint
    taps = kernel.data[::-1, ::-1, 0]
    row_offset = kernel.height - 1 - kernel.height // 2
    column_offset = kernel.width - 1 - kernel.width // 2
    return _linear_filter(taps, input_image, row_offset, column_offset)


def _valid_filter_size(filter_height: int, filter_width: int, name: str) -> bool:
    if filter_height <= 0 or filter_width <= 0:
        logger.debug(f"{name}: invalid filter size {filter_height}x{filter_width}")
        return False
    return True


def _padded_windows(plane: np.ndarray, filter_height: int, filter_width: int) -> np.ndarray:
    """
    View the filter window of every pixel of a 2D plane.

    Positions outside the plane are NaN, so they drop out together with
    NaN samples. The result is a strided view, nothing is copied per window.

    Returns:
        np.ndarray: (height, width, filter_height, filter_width) float64 view
    """
    mid_row = filter_height // 2
    mid_column = filter_width // 2
    padded = np.pad(
        plane.astype(np.float64),
        ((mid_row, filter_height - 1 - mid_row), (mid_column, filter_width - 1 - mid_column)),
        mode='constant',
        constant_values=np.nan
    )
    return sliding_window_view(padded, (filter_height, filter_width))


def _strip_rows(width: int, window_size: int) -> int:
    """Rows per strip so that one strip of gathered samples stays within the budget."""
    return max(1, WINDOW_SAMPLE_BUDGET // max(1, width * window_size))


def _rank_filter(input_image: DenseImage, filter_height: int, filter_width: int, rank, name: str) -> DenseImage:
    result = DenseImage.like(input_image, copy_data=False)
    if not _valid_filter_size(filter_height, filter_width, name) or input_image.size == 0:
        return result

    height, width = input_image.height, input_image.width
    window_size = filter_height * filter_width
    rows_per_strip = _strip_rows(width, window_size)

    for k in range(input_image.channels):
        plane = input_image.data[:, :, k]
        windows = _padded_windows(plane, filter_height, filter_width)
        for top in range(0, height, rows_per_strip):
            bottom = min(top + rows_per_strip, height)
            samples = windows[top:bottom].reshape(bottom - top, width, window_size)
            values = rank(samples, plane[top:bottom].astype(np.float64))
            with np.errstate(all='ignore'):
                np.copyto(result.data[top:bottom, :, k], values, casting='unsafe')
    return result


def _median(samples: np.ndarray, center: np.ndarray) -> np.ndarray:
    # np.sort places NaN last, so the valid samples lead each window
    ordered = np.sort(samples, axis=-1)
    counts = np.count_nonzero(~np.isnan(samples), axis=-1)
    picked = np.take_along_axis(ordered, (counts // 2)[..., np.newaxis], axis=-1)[..., 0]
    picked[counts == 0] = 0
    return picked


def _minimum(samples: np.ndarray, center: np.ndarray) -> np.ndarray:
    reduced = np.fmin.reduce(samples, axis=-1)
    return np.where(np.isnan(center), center, np.fmin(reduced, center))


def _maximum(samples: np.ndarray, center: np.ndarray) -> np.ndarray:
    reduced = np.fmax.reduce(samples, axis=-1)
    return np.where(np.isnan(center), center, np.fmax(reduced, center))


def median_filter2d(input_image: DenseImage, filter_height: int, filter_width: int) -> DenseImage:
    """
    Median of the non-NaN samples of each window.

    With ``n`` candidates the result is the sorted element at index ``n // 2``
    (the upper median for even ``n``); a window without candidates yields 0.
    """
    return _rank_filter(input_image, filter_height, filter_width, _median, 'median_filter2d')


def min_filter2d(input_image: DenseImage, filter_height: int, filter_width: int) -> DenseImage:
    """Minimum of the non-NaN samples of each window; a NaN centre stays NaN."""
    return _rank_filter(input_image, filter_height, filter_width, _minimum, 'min_filter2d')


def max_filter2d(input_image: DenseImage, filter_height: int, filter_width: int) -> DenseImage:
    """Maximum of the non-NaN samples of each window; a NaN centre stays NaN."""
    return _rank_filter(input_image, filter_height, filter_width, _maximum, 'max_filter2d')


def mean_filter2d(input_image: DenseImage, filter_height: int, filter_width: int) -> DenseImage:
    """
    Box average: ``filter2d`` with a uniform kernel whose L1 norm is 1.

    Near the border the skipped taps still count in the normalisation, so
    only pixels whose whole window lies inside the image keep a constant
    value unchanged.
    """
    if not _valid_filter_size(filter_height, filter_width, 'mean_filter2d'):
        return DenseImage.like(input_image, copy_data=False)

    kernel = DenseImage(filter_height, filter_width, 1)
    kernel.fill(1.0 / (filter_height * filter_width))
    return filter2d(kernel, input_image)
