import heapq
import math

import numpy as np
import pytest

from conftest import lab_grid
from superpixels.services.segmentation.errors import (
    InvalidImageDimension,
    InvalidSuperpixelCount,
    MismatchedBuffer,
    NanDistance,
    ZeroSuperpixelCount,
)
from superpixels.services.segmentation.growth import (
    GrowthElement,
    growth_cluster,
    growth_cluster_from_bytes,
)
from superpixels.services.segmentation.seeds import init_seeds
from superpixels.services.segmentation.utils import NEIGHBORS, get_in_bounds, grid_interval


def test_rejects_invalid_input():
    colors = np.zeros((100, 3))
    with pytest.raises(ZeroSuperpixelCount):
        growth_cluster(0, 10, 10, 10, colors)
    with pytest.raises(InvalidImageDimension):
        growth_cluster(4, 10, 0, 10, colors)
    with pytest.raises(InvalidSuperpixelCount):
        growth_cluster(100, 10, 10, 10, colors)
    with pytest.raises(MismatchedBuffer):
        growth_cluster(4, 10, 10, 10, np.zeros((101, 3)))


def test_element_rejects_nan():
    with pytest.raises(NanDistance):
        GrowthElement.create(math.nan, 1, 0, 0)


def test_elements_pop_in_distance_order():
    queue = []
    for distance, label in ((3.5, 1), (0.25, 2), (1.0, 3), (0.25, 1)):
        heapq.heappush(queue, GrowthElement.create(distance, label, 0, 0))
    popped = [heapq.heappop(queue) for _ in range(4)]
    assert [(e.distance, e.label) for e in popped] == [(0.25, 1), (0.25, 2), (1.0, 3), (3.5, 1)]


def test_nan_color_is_fatal():
    colors = np.zeros((16, 3))
    colors[15] = np.nan
    with pytest.raises(NanDistance):
        growth_cluster(1, 10, 4, 4, colors)


def test_single_superpixel_covers_image(noisy):
    width, height, colors = noisy
    labels = growth_cluster(1, 10, width, height, colors)
    assert labels.shape == (width * height,)
    assert (labels == 1).all()


def test_two_tone_split(two_tone):
    width, height, colors = two_tone
    labels = growth_cluster(2, 10, width, height, colors).reshape(height, width)
    assert (labels[:, :10] == 1).all()
    assert (labels[:, 10:] == 2).all()


def test_single_column_boundary():
    colors = lab_grid([[0.0], [53.585], [100.0]])
    labels = growth_cluster(1, 10, 1, 3, colors)
    np.testing.assert_array_equal(labels, [1, 1, 1])


def test_labels_cover_image_and_stay_in_range(noisy):
    width, height, colors = noisy
    k = 12
    labels = growth_cluster(k, 10, width, height, colors)

    s = int(grid_interval(width, height, k))
    num_seeds = len(init_seeds(width, height, s, k, colors))

    assert labels.shape == (width * height,)
    assert labels.min() >= 1
    assert labels.max() <= num_seeds


def test_no_isolated_pixels(noisy):
    width, height, colors = noisy
    labels = growth_cluster(20, 1, width, height, colors).tolist()

    for y in range(height):
        for x in range(width):
            neighbors = [get_in_bounds(width, height, x + dx, y + dy, labels) for dx, dy in NEIGHBORS]
            assert labels[y * width + x] in neighbors


def test_deterministic(noisy):
    width, height, colors = noisy
    first = growth_cluster(10, 5, width, height, colors)
    second = growth_cluster(10, 5, width, height, colors.copy())
    np.testing.assert_array_equal(first, second)


def test_from_bytes(two_tone_rgb):
    width, height, rgb = two_tone_rgb
    labels = growth_cluster_from_bytes(2, 10, width, height, rgb.tobytes()).reshape(height, width)
    assert (labels[:, :10] == 1).all()
    assert (labels[:, 10:] == 2).all()


def test_from_bytes_rejects_long_buffer():
    with pytest.raises(MismatchedBuffer) as e:
        growth_cluster_from_bytes(2, 10, 4, 4, bytes(49))
    assert "SNIC" in str(e.value)


def test_compactness_regularizes_regions():
    # Low amplitude lightness noise: color decides at m=1, position at m=20
    rng = np.random.default_rng(5)
    width, height = 32, 32
    colors = lab_grid(rng.uniform(0, 10, (height, width)))

    def spread(labels):
        ys, xs = np.divmod(np.arange(width * height), width)
        values = np.unique(labels)
        total = sum(xs[labels == v].var() + ys[labels == v].var() for v in values)
        return total / len(values)

    loose = growth_cluster(16, 1, width, height, colors)
    compact = growth_cluster(16, 20, width, height, colors)
    assert spread(compact) < spread(loose)


@pytest.mark.parametrize("width, height", [(40, 400), (400, 40), (1, 50), (50, 1)])
def test_single_superpixel_on_narrow_images(width, height):
    lightness = np.linspace(0.0, 100.0, width * height).reshape(height, width)
    labels = growth_cluster(1, 10, width, height, lab_grid(lightness))
    assert (labels == 1).all()


@pytest.mark.parametrize("width, height, k", [
    (40, 12, 6),
    (12, 40, 6),
    (60, 6, 5),
    (6, 60, 5),
    (500, 25, 4),
])
def test_labels_stay_in_seed_range_on_non_square_images(width, height, k):
    rng = np.random.default_rng(width * height + k)
    colors = lab_grid(rng.uniform(0, 100, (height, width)))
    labels = growth_cluster(k, 10, width, height, colors)

    s = int(grid_interval(width, height, k))
    num_seeds = len(init_seeds(width, height, s, k, colors))

    assert 1 <= num_seeds <= k
    assert labels.min() >= 1
    assert labels.max() <= num_seeds
