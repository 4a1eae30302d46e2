"""
Unit tests for core.reductions.
"""
import math

import numpy as np
import pytest

from src_dense_image import DenseImage
from src_dense_image.core.reductions import (
    sum_along, mean_along, min_along, max_along,
    sum_region, sum_single_channel, sum_all, l1_norm, l2_norm,
    ROWS, COLUMNS, CHANNELS
)


class TestCollapse:
    """Test cases for the dimension-collapsing reductions"""

    def test_sum_along_rows(self, ramp_image):
        result = sum_along(ramp_image, ROWS)
        assert result.shape == (1, 4, 1)
        np.testing.assert_array_equal(result.data[0, :, 0], [12, 15, 18, 21])

    def test_mean_along_columns(self, ramp_image):
        result = mean_along(ramp_image, COLUMNS)
        assert result.shape == (3, 1, 1)
        np.testing.assert_array_equal(result.data[:, 0, 0], [1.5, 5.5, 9.5])

    def test_channels_by_default(self, rgb_image):
        assert sum_along(rgb_image).shape == (2, 3, 1)
        np.testing.assert_array_equal(sum_along(rgb_image).data, 9)
        np.testing.assert_array_equal(min_along(rgb_image).data, 1)
        np.testing.assert_array_equal(max_along(rgb_image, CHANNELS).data, 6)

    def test_invalid_dimension_collapses_channels(self, rgb_image):
        assert mean_along(rgb_image, 7).shape == (2, 3, 1)
        np.testing.assert_array_equal(mean_along(rgb_image, 0).data, 3)

    def test_min_max_along_rows(self, ramp_image):
        np.testing.assert_array_equal(min_along(ramp_image, ROWS).data[0, :, 0], [0, 1, 2, 3])
        np.testing.assert_array_equal(max_along(ramp_image, ROWS).data[0, :, 0], [8, 9, 10, 11])

    def test_integer_mean_truncates(self):
        image = DenseImage.from_array(np.array([[1, 2]], dtype=np.int32))
        result = mean_along(image, COLUMNS)
        assert result.dtype == np.int32
        assert result.at(0, 0) == 1

    def test_empty_input(self):
        assert sum_along(DenseImage()).is_empty()
        assert max_along(DenseImage(0, 4, 2), ROWS).is_empty()


class TestRegionSums:
    """Test cases for region sums and norms"""

    def test_constant_image_sums(self, constant_image):
        assert sum_all(constant_image) == 80
        assert l1_norm(constant_image) == 80
        assert l2_norm(constant_image) == 20

    def test_region_clamps_upper_bound(self, ramp_image):
        assert sum_region(ramp_image, 1, 99) == sum(range(4, 12))

    def test_region_single_column(self, ramp_image):
        assert sum_region(ramp_image, -1, -1, 1, 1) == 1 + 5 + 9

    def test_region_with_inverted_bounds_is_zero(self, ramp_image):
        assert sum_region(ramp_image, 2, 1) == 0

    def test_single_channel(self, rgb_image):
        assert sum_single_channel(rgb_image, 2) == 36
        assert sum_single_channel(rgb_image, 3) == 0

    def test_norms_with_negative_values(self):
        image = DenseImage.from_array(np.array([[3.0, -4.0]]))
        assert l1_norm(image) == 7
        assert l2_norm(image) == 5
        assert sum_all(image) == -1

    def test_result_type_follows_image(self):
        image = DenseImage(2, 2, 1, dtype=np.int32)
        image.fill(3)
        assert isinstance(sum_all(image), np.int32)
        assert l2_norm(image) == 6

    def test_empty_image(self):
        assert sum_all(DenseImage()) == 0
        assert l1_norm(DenseImage()) == 0
        assert l2_norm(DenseImage()) == 0

    def test_l2_norm_float(self, ramp_image):
        expected = math.sqrt(sum(v * v for v in range(12)))
        assert l2_norm(ramp_image) == pytest.approx(expected)
