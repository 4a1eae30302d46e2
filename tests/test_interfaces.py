"""
Unit tests for the LocalMatcher and FeatureDetector interfaces, exercised
through small concrete implementations built on the core operations.
"""
from typing import Sequence, Tuple

import numpy as np
import pytest

from src_dense_image import (
    DenseImage, LocalMatcher, MatcherState, FeatureDetector, have_equal_dimensions
)
from src_dense_image.core import algebra
from src_dense_image.core.reductions import mean_along
from src_dense_image.geometry import shift_image_xy
from dense_image_utils.logger_config import LoggerConfig


class AbsoluteDifferenceMatcher(LocalMatcher):
    """Matches by the absolute difference against the shifted second image."""

    def __init__(self):
        super().__init__()
        self.first = None
        self.second = None
        self.max_difference = None

    def set_image_pair(self, first, second):
        if not have_equal_dimensions(first, second):
            self.logger.debug(f"Rejected image pair {first.shape} vs {second.shape}")
            return False
        self.first, self.second = first, second
        self.state = MatcherState.IMAGE_PAIR_SET
        return True

    def set_params(self, *params):
        if len(params) != 1 or params[0] <= 0:
            self.logger.debug(f"Rejected parameters {params}")
            return False
        self.max_difference = params[0]
        self.state = MatcherState.PARAMS_SET if self.first is None else MatcherState.READY
        return True

    def get_raw_match(self, shift_x, shift_y=0):
        return algebra.abs(self.first - shift_image_xy(self.second, shift_x, shift_y))

    def get_match(self, shift_x, shift_y=0):
        difference = mean_along(self.get_raw_match(shift_x, shift_y)) / self.max_difference
        quality = 1 - difference
        quality.copy_masked(quality < 0, 0)
        return quality


class BrightPixelDetector(FeatureDetector[Tuple[int, int]]):
    """Reports (row, column) of channel-0 pixels above a threshold."""

    def __init__(self, threshold):
        super().__init__()
        self.threshold = threshold

    def detect_features(self, image: DenseImage) -> Sequence[Tuple[int, int]]:
        mask = image.get_sub_image(-1, -1, -1, -1, 0, 0) > self.threshold
        rows, columns = np.nonzero(mask.data[:, :, 0])
        self.detected_features = list(zip(rows.tolist(), columns.tolist()))
        return self.detected_features


class TestLocalMatcher:
    """Test cases for the LocalMatcher contract"""

    def test_logger_named_after_implementation(self):
        matcher = AbsoluteDifferenceMatcher()
        assert matcher.logger.name.endswith("local_matcher.AbsoluteDifferenceMatcher")
        assert matcher.logger.name.startswith("dense_image_toolkit.")

    def test_rejected_calls_are_logged(self, caplog, ramp_image, constant_image):
        matcher = AbsoluteDifferenceMatcher()
        matcher.logger.addHandler(caplog.handler)
        try:
            with LoggerConfig.diagnostics():
                matcher.set_image_pair(ramp_image, constant_image)
                matcher.set_params(-1.0)
        finally:
            matcher.logger.removeHandler(caplog.handler)

        messages = [record.getMessage() for record in caplog.records]
        assert any(message.startswith("Rejected image pair") for message in messages)
        assert any(message.startswith("Rejected parameters") for message in messages)

    def test_cannot_instantiate_interface(self):
        with pytest.raises(TypeError):
            LocalMatcher()

    def test_starts_unconfigured(self):
        matcher = AbsoluteDifferenceMatcher()
        assert matcher.state == MatcherState.UNCONFIGURED
        assert not matcher.is_ready()

    def test_rejects_mismatched_pair(self, ramp_image, constant_image):
        matcher = AbsoluteDifferenceMatcher()
        assert not matcher.set_image_pair(ramp_image, constant_image)
        assert matcher.state == MatcherState.UNCONFIGURED

    def test_configuration_sequence(self, ramp_image):
        matcher = AbsoluteDifferenceMatcher()
        assert matcher.set_image_pair(ramp_image, ramp_image.copy())
        assert matcher.state == MatcherState.IMAGE_PAIR_SET
        assert not matcher.set_params()
        assert matcher.set_params(4.0)
        assert matcher.is_ready()

    def test_match_of_identical_images(self, random_image):
        matcher = AbsoluteDifferenceMatcher()
        matcher.set_image_pair(random_image, random_image.copy())
        matcher.set_params(1.0)

        match = matcher.get_match(0)
        assert match.shape == (6, 7, 1)
        np.testing.assert_array_equal(match.data, 1)

        raw = matcher.get_raw_match(0)
        assert raw.channels == random_image.channels
        assert not raw.data.any()

    def test_match_finds_shift(self, ramp_image):
        shifted = shift_image_xy(ramp_image, columns=-1)
        matcher = AbsoluteDifferenceMatcher()
        matcher.set_image_pair(shifted, ramp_image)
        matcher.set_params(20.0)

        match = matcher.get_match(-1)
        np.testing.assert_array_equal(match.data[:, :3, 0], 1)
        assert np.all((match.data >= 0) & (match.data <= 1))


class TestFeatureDetector:
    """Test cases for the FeatureDetector contract"""

    def test_cannot_instantiate_interface(self):
        with pytest.raises(TypeError):
            FeatureDetector()

    def test_detects_and_stores_features(self, ramp_image):
        detector = BrightPixelDetector(9)
        features = detector.detect_features(ramp_image)
        assert features == [(2, 2), (2, 3)]
        assert detector.detected_features == features

    def test_each_run_replaces_features(self, ramp_image, constant_image):
        detector = BrightPixelDetector(9)
        detector.detect_features(ramp_image)
        assert detector.detect_features(constant_image) == []
        assert detector.detected_features == []

    def test_clear_features(self, ramp_image):
        detector = BrightPixelDetector(0)
        detector.detect_features(ramp_image)
        detector.clear_features()
        assert detector.detected_features == []

    def test_clear_features_is_logged(self, caplog, ramp_image):
        detector = BrightPixelDetector(9)
        detector.detect_features(ramp_image)
        detector.logger.addHandler(caplog.handler)
        try:
            with LoggerConfig.diagnostics():
                detector.clear_features()
        finally:
            detector.logger.removeHandler(caplog.handler)

        assert [record.getMessage() for record in caplog.records] == ["Clearing 2 features"]
