"""
Gabor phase stack.

For every (period, orientation) pair the first channel of an image is
convolved with an odd (phase 0) and an even (phase 90) Gabor kernel; the local
phase ``atan2(odd, even)`` of the pair becomes one output channel. Channels
are ordered period-major, orientation-minor.
"""

from typing import Optional

import numpy as np

from dense_image_config.config import Config
from ..core.dense_image import DenseImage
from ..core.algebra import atan2
from ..filtering.filter_engine import convolve2d
from .kernel_factory import gabor_oriented
from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)


def gabor_phase_stack(image: DenseImage, config: Optional[Config] = None) -> DenseImage:
    """
    Compute the Gabor phase of channel 0 for every period and orientation.

    Args:
        image: Input image, only channel 0 is used
        config: Configuration providing the periods, angles, kernel size and
            sigma factor (default: built-in defaults, 4 periods x 4 angles)

    Returns:
        DenseImage: (H, W, periods * angles) float64 phases in [-pi, pi]
    """
    settings = (config or Config()).get_gabor_stack_settings()
    periods = settings["periods"]
    angles = settings["angles"]
    size = settings["kernel_size"]
    sigma_factor = settings["sigma_factor"]

    result = DenseImage(image.height, image.width, len(periods) * len(angles), dtype=np.float64)
    if image.size == 0:
        return result

    source = image.get_sub_image(-1, -1, -1, -1, 0, 0).astype(np.float64)

    n = 0
    for period in periods:
        for angle in angles:
            odd_kernel = gabor_oriented(size, sigma_factor * period, period, angle, 0)
            even_kernel = gabor_oriented(size, sigma_factor * period, period, angle, 90)
            phase = atan2(convolve2d(odd_kernel, source), convolve2d(even_kernel, source))
            result.copy_channel(phase, 0, n)
            n += 1

    logger.debug(f"Gabor phase stack: {len(periods)} periods x {len(angles)} angles on {image.height}x{image.width}")
    return result
