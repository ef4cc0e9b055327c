import numpy as np
import pytest

from conftest import lab_grid
from superpixels.services.segmentation.errors import (
    InvalidImageDimension,
    InvalidSuperpixelCount,
    MismatchedBuffer,
    ZeroSuperpixelCount,
)
from superpixels.services.segmentation.iterative import (
    assign_pixels,
    iterative_cluster,
    iterative_cluster_from_bytes,
    update_centers,
)
from superpixels.services.segmentation.seeds import init_seeds, perturb
from superpixels.services.segmentation.utils import compactness_factor


def test_rejects_invalid_input():
    colors = np.zeros((100, 3))
    with pytest.raises(ZeroSuperpixelCount):
        iterative_cluster(0, 10, 10, 10, None, colors)
    with pytest.raises(InvalidImageDimension):
        iterative_cluster(4, 10, 0, 10, None, colors)
    with pytest.raises(InvalidImageDimension):
        iterative_cluster(4, 10, 10, 0, None, colors)
    with pytest.raises(InvalidSuperpixelCount):
        iterative_cluster(100, 10, 10, 10, None, colors)
    with pytest.raises(MismatchedBuffer):
        iterative_cluster(4, 10, 10, 10, None, np.zeros((99, 3)))


def test_single_superpixel_covers_image(noisy):
    width, height, colors = noisy
    labels = iterative_cluster(1, 10, width, height, None, colors)
    assert labels.shape == (width * height,)
    assert (labels == 0).all()


def test_two_tone_split(two_tone):
    width, height, colors = two_tone
    labels = iterative_cluster(2, 10, width, height, None, colors).reshape(height, width)
    assert (labels[:, :10] == 0).all()
    assert (labels[:, 10:] == 1).all()


def test_single_column_boundary():
    colors = lab_grid([[0.0], [53.585], [100.0]])
    labels = iterative_cluster(1, 10, 1, 3, None, colors)
    assert len(set(labels.tolist())) == 1


def test_labels_are_sequential_from_zero(noisy):
    width, height, colors = noisy
    labels = iterative_cluster(12, 10, width, height, 5, colors)
    assert labels.shape == (width * height,)
    assert set(np.unique(labels)) == set(range(labels.max() + 1))


def test_deterministic(noisy):
    width, height, colors = noisy
    first = iterative_cluster(10, 5, width, height, None, colors)
    second = iterative_cluster(10, 5, width, height, None, colors.copy())
    np.testing.assert_array_equal(first, second)


def test_accepts_image_shaped_grid(two_tone):
    width, height, colors = two_tone
    flat = iterative_cluster(2, 10, width, height, None, colors)
    shaped = iterative_cluster(2, 10, width, height, None, colors.reshape(height, width, 3))
    np.testing.assert_array_equal(flat, shaped)


def test_from_bytes(two_tone_rgb):
    width, height, rgb = two_tone_rgb
    labels = iterative_cluster_from_bytes(2, 10, width, height, None, rgb.tobytes())
    labels = labels.reshape(height, width)
    assert (labels[:, :10] == 0).all()
    assert (labels[:, 10:] == 1).all()


def test_from_bytes_rejects_short_buffer():
    with pytest.raises(MismatchedBuffer) as e:
        iterative_cluster_from_bytes(2, 10, 4, 4, None, bytes(47))
    assert "SLIC" in str(e.value)


def test_assignment_never_increases_distances(noisy):
    width, height, colors = noisy
    s = 5
    factor = compactness_factor(10, s)
    clusters = init_seeds(width, height, s, 12, colors)
    for seed in clusters:
        perturb(seed, width, height, colors)

    distances = np.full(len(colors), np.inf)
    labels = np.zeros(len(colors), dtype=np.int64)

    previous = distances.copy()
    for _ in range(3):
        assign_pixels(clusters, colors, distances, labels, width, height, s, factor)
        assert (distances <= previous).all()
        previous = distances.copy()
        update_centers(clusters, colors, labels, width)


def test_assignment_is_windowed(two_tone):
    width, height, colors = two_tone
    clusters = init_seeds(width, height, 2, 1, colors)[:1]
    distances = np.full(len(colors), np.inf)
    labels = np.zeros(len(colors), dtype=np.int64)

    assign_pixels(clusters, colors, distances, labels, width, height, 2, 1.0)

    # Seed at (1, 1), window [0, 3) x [0, 3)
    reached = np.isfinite(distances).reshape(height, width)
    assert reached[:3, :3].all()
    assert reached.sum() == 9


def test_update_skips_empty_clusters(two_tone):
    width, height, colors = two_tone
    clusters = init_seeds(width, height, 10, 2, colors)
    before = (clusters[1].x, clusters[1].y, clusters[1].color.copy())
    labels = np.zeros(len(colors), dtype=np.int64)

    update_centers(clusters, colors, labels, width)

    assert (clusters[0].x, clusters[0].y) == (9, 4)
    assert clusters[0].color[0] == pytest.approx(50.0)
    assert (clusters[1].x, clusters[1].y) == before[:2]
    np.testing.assert_array_equal(clusters[1].color, before[2])


@pytest.mark.parametrize("width, height", [(40, 400), (400, 40), (1, 50), (50, 1)])
def test_single_superpixel_on_narrow_images(width, height):
    lightness = np.linspace(0.0, 100.0, width * height).reshape(height, width)
    labels = iterative_cluster(1, 10, width, height, None, lab_grid(lightness))
    assert (labels == 0).all()


def test_compactness_regularizes_regions():
    # Low amplitude lightness noise: color decides at m=1, position at m=20
    rng = np.random.default_rng(5)
    width, height = 32, 32
    colors = lab_grid(rng.uniform(0, 10, (height, width)))

    def boundary(labels):
        grid = labels.reshape(height, width)
        return int((grid[:, 1:] != grid[:, :-1]).sum() + (grid[1:, :] != grid[:-1, :]).sum())

    loose = iterative_cluster(16, 1, width, height, None, colors)
    compact = iterative_cluster(16, 20, width, height, None, colors)
    assert boundary(compact) < boundary(loose)
