"""
Factories for filter kernels and coordinate grids.

All kernels are single-channel float64 DenseImage instances. The kernel
centre is at ``(size - 1) / 2`` on both axes, with ``x`` running along the
columns and ``y`` along the rows.
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..core.dense_image import DenseImage
from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)


def _centred_coordinates(size: int) -> Tuple[np.ndarray, np.ndarray]:
    half = (size - 1) / 2.0
    y, x = np.mgrid[0:size, 0:size].astype(np.float64)
    return x - half, y - half


def gaussian(size: int, sigma: float) -> DenseImage:
    """
    Square Gaussian kernel normalised to an L1 norm of 1.

    Args:
        size: Kernel side length (non-positive gives an empty kernel)
        sigma: Standard deviation in pixels

    Returns:
        DenseImage: (size, size, 1) kernel
    """
    kernel = DenseImage(size, size, 1)
    if kernel.size == 0:
        logger.debug(f"gaussian: invalid size {size}")
        return kernel

    x, y = _centred_coordinates(size)
    with np.errstate(all='ignore'):
        values = np.exp(-0.5 * (x * x + y * y) / (sigma * sigma))
        kernel.data[:, :, 0] = values / np.abs(values).sum()
    return kernel


def _gabor(size: int, sigma: float, period: float, phaseshift: float, direction) -> DenseImage:
    """
    Gaussian-windowed sine along ``direction(x, y)``.

    The kernel is divided by the sum of its Gaussian envelope. Phase shift
    is in degrees.
    """
    if size <= 0 or sigma <= 0 or period <= 0:
        logger.debug(f"gabor: invalid parameters size={size}, sigma={sigma}, period={period}")
        return DenseImage()

    kernel = DenseImage(size, size, 1)
    if kernel.size == 0:
        return kernel

    x, y = _centred_coordinates(size)
    envelope = np.exp(-0.5 * (x * x + y * y) / (sigma * sigma))
    phase = math.radians(phaseshift)
    carrier = np.sin(2 * math.pi * direction(x, y) / period + phase)
    kernel.data[:, :, 0] = envelope * carrier / envelope.sum()
    return kernel


def gabor_x(size: int, sigma: float, period: float, phaseshift: float = 0) -> DenseImage:
    """Gabor kernel oscillating along the columns (x)."""
    return _gabor(size, sigma, period, phaseshift, lambda x, y: x)


def gabor_y(size: int, sigma: float, period: float, phaseshift: float = 0) -> DenseImage:
    """Gabor kernel oscillating along the rows (y)."""
    return _gabor(size, sigma, period, phaseshift, lambda x, y: y)


def gabor_oriented(size: int, sigma: float, period: float, angle: float, phaseshift: float = 0) -> DenseImage:
    """
    Gabor kernel oscillating along direction ``angle``.

    Args:
        size: Kernel side length
        sigma: Standard deviation of the Gaussian envelope
        period: Wavelength of the carrier in pixels
        angle: Orientation in degrees, 0 is along x and 90 along y
        phaseshift: Carrier phase in degrees

    Returns:
        DenseImage: (size, size, 1) kernel, empty for non-positive
        size, sigma or period
    """
    theta = math.radians(angle)
    cos_theta, sin_theta = math.cos(theta), math.sin(theta)
    return _gabor(size, sigma, period, phaseshift, lambda x, y: x * cos_theta + y * sin_theta)


def _grid_shape(x1: float, x2: float, y1: float, y2: float, dx: float, dy: float) -> Optional[Tuple[int, int]]:
    if dx == 0 or dy == 0:
        logger.debug("meshgrid: zero step")
        return None
    width = 1 + int(math.floor((x2 - x1) / dx))
    height = 1 + int(math.floor((y2 - y1) / dy))
    return height, width


def meshgrid_x(x1: float, x2: float, y1: float, y2: float, dx: float = 1, dy: float = 1) -> DenseImage:
    """Grid whose value at column ``j`` is ``x1 + j * dx`` on every row."""
    shape = _grid_shape(x1, x2, y1, y2, dx, dy)
    if shape is None:
        return DenseImage()

    grid = DenseImage(shape[0], shape[1], 1)
    if grid.size > 0:
        grid.data[:, :, 0] = (x1 + np.arange(grid.width) * dx)[np.newaxis, :]
    return grid


def meshgrid_y(x1: float, x2: float, y1: float, y2: float, dx: float = 1, dy: float = 1) -> DenseImage:
    """Grid whose value at row ``i`` is ``y1 + i * dy`` on every column."""
    shape = _grid_shape(x1, x2, y1, y2, dx, dy)
    if shape is None:
        return DenseImage()

    grid = DenseImage(shape[0], shape[1], 1)
    if grid.size > 0:
        grid.data[:, :, 0] = (y1 + np.arange(grid.height) * dy)[:, np.newaxis]
    return grid


def random(
    lower_bound: float,
    upper_bound: float,
    height: int,
    width: int,
    channels: int = 1,
    seed: Optional[int] = None
) -> DenseImage:
    """Uniformly distributed values between the bounds."""
    image = DenseImage(height, width, channels)
    image.set_to_random(lower_bound, upper_bound, seed)
    return image
