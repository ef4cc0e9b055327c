import numpy as np
import pytest


def lab_grid(lightness):
    """(H, W) lightness values -> (H*W, 3) CIELAB grid with a = b = 0."""
    lightness = np.asarray(lightness, dtype=np.float64)
    grid = np.zeros(lightness.shape + (3,))
    grid[..., 0] = lightness
    return grid.reshape(-1, 3)


@pytest.fixture
def two_tone():
    """20x10 image: black left half, white right half."""
    width, height = 20, 10
    lightness = np.zeros((height, width))
    lightness[:, width // 2:] = 100.0
    return width, height, lab_grid(lightness)


@pytest.fixture
def two_tone_rgb():
    width, height = 20, 10
    rgb = np.zeros((height, width, 3), dtype=np.uint8)
    rgb[:, width // 2:] = 255
    return width, height, rgb


@pytest.fixture
def noisy():
    """Deterministic 24x18 random CIELAB image."""
    rng = np.random.default_rng(7)
    width, height = 24, 18
    colors = np.column_stack([
        rng.uniform(0, 100, width * height),
        rng.uniform(-60, 60, width * height),
        rng.uniform(-60, 60, width * height),
    ])
    return width, height, colors
