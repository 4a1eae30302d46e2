"""
Base class for feature detectors.
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Sequence, TypeVar

from ..core.dense_image import DenseImage
from dense_image_utils.logger_config import get_logger

F = TypeVar('F')


class FeatureDetector(ABC, Generic[F]):
    """
    Abstract detector of features of type ``F`` (points, blobs, ...).

    Each detection run replaces ``detected_features``, the detector's single
    result slot.
    """

    def __init__(self):
        self.detected_features: List[F] = []
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def detect_features(self, image: DenseImage) -> Sequence[F]:
        """
        Detect features in an image.

        Args:
            image: Image to analyse

        Returns:
            Sequence[F]: The detected features, also stored in
            ``detected_features``
        """
        pass

    def clear_features(self) -> None:
        self.logger.debug(f"Clearing {len(self.detected_features)} features")
        self.detected_features = []
