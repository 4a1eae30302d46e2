"""
Base class for local image matchers.

A local matcher compares a pair of equally sized images under a relative
shift and reports a per-pixel match quality, e.g. as one step of a
disparity search.
"""

from abc import ABC, abstractmethod
from enum import Enum

from ..core.dense_image import DenseImage
from dense_image_utils.logger_config import get_logger


class MatcherState(Enum):
    """Configuration stages of a matcher, in the order they are reached."""
    UNCONFIGURED = 'unconfigured'
    IMAGE_PAIR_SET = 'image_pair_set'
    PARAMS_SET = 'params_set'
    READY = 'ready'


class LocalMatcher(ABC):
    """
    Abstract local matcher.

    Usage is ``set_image_pair`` then ``set_params`` then any number of
    ``get_match`` / ``get_raw_match`` calls. Implementations track their
    progress in ``state`` and decide how to react to out-of-order calls;
    rejected calls are reported at DEBUG on ``self.logger``.
    """

    def __init__(self):
        self.state = MatcherState.UNCONFIGURED
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def set_image_pair(self, first: DenseImage, second: DenseImage) -> bool:
        """
        Provide the two images to compare.

        Returns:
            bool: False if the images' dimensions differ
        """
        pass

    @abstractmethod
    def set_params(self, *params: float) -> bool:
        """
        Set matcher-specific parameters.

        Returns:
            bool: False if the parameters are not acceptable
        """
        pass

    @abstractmethod
    def get_match(self, shift_x: int, shift_y: int = 0) -> DenseImage:
        """
        Match quality of the pair at a shift.

        Returns:
            DenseImage: Single channel, values in [0, 1] with 1 the best match
        """
        pass

    @abstractmethod
    def get_raw_match(self, shift_x: int, shift_y: int = 0) -> DenseImage:
        """
        Unnormalised match at a shift.

        Returns:
            DenseImage: Same channel count as the input images
        """
        pass

    def is_ready(self) -> bool:
        return self.state == MatcherState.READY
