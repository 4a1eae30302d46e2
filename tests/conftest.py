"""
Shared pytest fixtures for the dense image tests.
"""
import numpy as np
import pytest

from src_dense_image import DenseImage


@pytest.fixture
def ramp_image():
    """3x4x1 float64 image holding 0..11 in row-major order (value = 4 * row + col)."""
    return DenseImage.from_array(np.arange(12, dtype=np.float64).reshape(3, 4))


@pytest.fixture
def constant_image():
    """4x4x1 image filled with 5."""
    image = DenseImage(4, 4, 1)
    image.fill(5)
    return image


@pytest.fixture
def rgb_image():
    """2x3x3 image whose channels hold 1, 2 and 6."""
    values = np.zeros((2, 3, 3))
    values[:, :, 0] = 1
    values[:, :, 1] = 2
    values[:, :, 2] = 6
    return DenseImage.from_array(values)


@pytest.fixture
def impulse_image():
    """5x5x1 image with a single 1 at the centre."""
    image = DenseImage(5, 5, 1)
    image.set_at(1.0, 2, 2)
    return image


@pytest.fixture
def random_image():
    """Reproducible 6x7x2 image of uniform values in [-1, 1]."""
    rng = np.random.default_rng(1234)
    return DenseImage.from_array(rng.uniform(-1, 1, size=(6, 7, 2)))
