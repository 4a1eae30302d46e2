"""
Bridge between DenseImage and externally owned image buffers.

``ImageAdapter`` is the per-pixel protocol a foreign image type implements;
``DenseImage.copy_from_adapter`` / ``copy_to_adapter`` move whole images
through it. ``OpenCVImageAdapter`` wraps an OpenCV image (a numpy array in
BGR channel order).
"""

from abc import ABC, abstractmethod
from typing import Tuple

import cv2
import numpy as np

from dense_image_utils.logger_config import get_logger

logger = get_logger(__name__)


class ImageAdapter(ABC):
    """
    Abstract access to an external image.

    Subclasses implement the three per-pixel methods. ``read_pixels`` and
    ``write_pixels`` move the whole image through them and can be overridden
    with a bulk transfer when the external type allows one.
    """

    @abstractmethod
    def get_size(self) -> Tuple[int, int, int]:
        """Return (height, width, channels) of the external image."""
        pass

    @abstractmethod
    def get_pixel(self, row: int, column: int, channel: int) -> float:
        pass

    @abstractmethod
    def set_pixel(self, value: float, row: int, column: int, channel: int) -> None:
        pass

    def read_pixels(self) -> np.ndarray:
        """
        Read every pixel.

        Returns:
            np.ndarray: (height, width, channels) float64 values
        """
        height, width, channels = self.get_size()
        values = np.zeros((height, width, channels), dtype=np.float64, order='F')
        for k in range(channels):
            for j in range(width):
                for i in range(height):
                    values[i, j, k] = self.get_pixel(i, j, k)
        return values

    def write_pixels(self, values: np.ndarray) -> None:
        """Write a (height, width, channels) array matching ``get_size()``."""
        height, width, channels = values.shape
        for k in range(channels):
            for j in range(width):
                for i in range(height):
                    self.set_pixel(float(values[i, j, k]), i, j, k)


class OpenCVImageAdapter(ImageAdapter):
    """
    Adapter over an OpenCV image held in a numpy array.

    The wrapped array is shared, not copied: writes through the adapter change
    the caller's image. With ``swap_red_blue`` a 3-channel BGR image is seen
    as RGB, so that channel 0 is red.
    """

    _SWAPPABLE_DEPTHS = (np.uint8, np.uint16, np.float32)

    def __init__(self, image: np.ndarray, swap_red_blue: bool = False):
        """
        Args:
            image: (H, W) or (H, W, C) array
            swap_red_blue: Present a BGR image in RGB order

        Raises:
            ValueError: If the array is not 2D/3D, or channel swapping is
                requested for something other than a 3-channel 8U/16U/32F image
        """
        if image.ndim not in (2, 3):
            raise ValueError(f"Expected an (H, W) or (H, W, C) image, got shape {image.shape}")
        if swap_red_blue:
            if image.ndim != 3 or image.shape[2] != 3:
                raise ValueError(f"Red/blue swapping needs a 3-channel image, got shape {image.shape}")
            if image.dtype.type not in self._SWAPPABLE_DEPTHS:
                raise ValueError(f"cvtColor does not support {image.dtype} images")

        self.image = image
        self.swap_red_blue = swap_red_blue

    def get_size(self) -> Tuple[int, int, int]:
        if self.image.ndim == 2:
            return self.image.shape[0], self.image.shape[1], 1
        return self.image.shape

    def _channel(self, channel: int) -> int:
        return 2 - channel if self.swap_red_blue else channel

    def get_pixel(self, row: int, column: int, channel: int) -> float:
        if self.image.ndim == 2:
            return float(self.image[row, column])
        return float(self.image[row, column, self._channel(channel)])

    def set_pixel(self, value: float, row: int, column: int, channel: int) -> None:
        value = self._saturate(np.asarray(value))
        if self.image.ndim == 2:
            self.image[row, column] = value
        else:
            self.image[row, column, self._channel(channel)] = value

    def _saturate(self, values: np.ndarray) -> np.ndarray:
        """Round and clip to the range of an integer image, as OpenCV's saturate_cast."""
        if np.issubdtype(self.image.dtype, np.integer):
            limits = np.iinfo(self.image.dtype)
            return np.clip(np.rint(values), limits.min, limits.max).astype(self.image.dtype)
        return values.astype(self.image.dtype)

    def read_pixels(self) -> np.ndarray:
        image = self.image
        if self.swap_red_blue:
            image = cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_BGR2RGB)
        if image.ndim == 2:
            image = image[:, :, np.newaxis]
        return np.asfortranarray(image, dtype=np.float64)

    def write_pixels(self, values: np.ndarray) -> None:
        pixels = self._saturate(values)
        if self.swap_red_blue:
            pixels = cv2.cvtColor(np.ascontiguousarray(pixels), cv2.COLOR_RGB2BGR)
        if self.image.ndim == 2:
            pixels = pixels[:, :, 0]
        self.image[...] = pixels
        logger.debug(f"Wrote {values.shape} pixels to OpenCV image")
