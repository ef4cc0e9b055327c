"""
SLIC - simple linear iterative clustering.

Reference:
    Achanta, R., Shaji, A., Smith, K., Lucchi, A., Fua, P., & Süsstrunk, S.
    SLIC Superpixels Compared to State-of-the-art Superpixel Methods.
    IEEE TPAMI, vol. 34, num. 11, p. 2274-2282, 2012.
"""

import numpy as np

from .color import rgb_bytes_to_lab
from .connectivity import merge_small_fragments
from .errors import ConversionError, MismatchedBuffer
from .seeds import init_seeds, perturb
from .utils import (
    allocate,
    color_distance,
    compactness_factor,
    joint_distance,
    spatial_distance,
    to_u32,
    validate_parameters,
)

DEFAULT_ITERATIONS = 10


def iterative_cluster_from_bytes(k, m, width, height, iterations, image):
    """
    SLIC over a buffer of interleaved RGB bytes.

    The buffer must hold exactly width * height * 3 bytes.
    """
    if len(image) != width * height * 3:
        raise MismatchedBuffer("slic")
    return iterative_cluster(k, m, width, height, iterations, rgb_bytes_to_lab(image, width, height))


def iterative_cluster(k, m, width, height, iterations, colors):
    """
    Calculate SLIC labels.

    Args:
        k:          number of superpixels to find, must not be 0
        m:          compactness, clamped to [1, 20]
        width:      image width, must not be 0
        height:     image height, must not be 0
        iterations: assign/update rounds, 10 when None
        colors:     CIELAB grid, (width * height, 3) or (height, width, 3)

    Returns:
        int64 array of width * height labels, 0-based.
    """
    m, s, colors = validate_parameters(k, m, width, height, colors, "slic")
    iterations = DEFAULT_ITERATIONS if iterations is None else int(iterations)
    factor = compactness_factor(m, s)

    # Init seeds and shuffle them to a hopefully non-noisy pixel
    clusters = init_seeds(width, height, s, k, colors)
    for seed in clusters:
        perturb(seed, width, height, colors)

    distances = allocate(len(colors), np.inf, np.float64)
    labels = allocate(len(colors), 0, np.int64)

    for _ in range(iterations):
        assign_pixels(clusters, colors, distances, labels, width, height, s, factor)
        update_centers(clusters, colors, labels, width)

    return merge_small_fragments(width, height, s, labels)


def assign_pixels(clusters, colors, distances, labels, width, height, s, factor):
    """
    Assignment step.

    Each center only searches the 2S x 2S window around itself. A pixel
    takes the center's label when it is strictly closer than the best
    distance stored so far, so stored distances never increase.
    """
    colors_2d = colors.reshape(height, width, 3)
    distances_2d = distances.reshape(height, width)
    labels_2d = labels.reshape(height, width)

    for index, center in enumerate(clusters):
        y_start, y_end = max(center.y - s, 0), min(center.y + s, height)
        x_start, x_end = max(center.x - s, 0), min(center.x + s, width)
        if y_start >= y_end or x_start >= x_end:
            continue

        ys, xs = np.mgrid[y_start:y_end, x_start:x_end]
        distance = joint_distance(
            color_distance(colors_2d[y_start:y_end, x_start:x_end], center.color),
            spatial_distance((xs, ys), (center.x, center.y)),
            factor,
        )

        window_distances = distances_2d[y_start:y_end, x_start:x_end]
        window_labels = labels_2d[y_start:y_end, x_start:x_end]
        closer = distance < window_distances
        window_distances[closer] = distance[closer]
        window_labels[closer] = index


def update_centers(clusters, colors, labels, width):
    """
    Update step: move every center to the mean color and truncated mean
    position of its pixels. Centers without pixels stay where they are.
    """
    n = len(clusters)
    positions = np.arange(len(labels))
    xs = (positions % width).astype(np.float64)
    ys = (positions // width).astype(np.float64)

    counts = np.bincount(labels, minlength=n)
    sum_x = np.bincount(labels, weights=xs, minlength=n)
    sum_y = np.bincount(labels, weights=ys, minlength=n)
    sum_color = np.stack(
        [np.bincount(labels, weights=colors[:, c], minlength=n) for c in range(3)],
        axis=1,
    )

    for index, center in enumerate(clusters):
        count = counts[index]
        if count == 0:
            continue
        center.color = sum_color[index] / count
        center.x = to_u32(sum_x[index] / count, ConversionError("Update X out of bounds"))
        center.y = to_u32(sum_y[index] / count, ConversionError("Update Y out of bounds"))


# Shorter name used by the registry and API
slic = iterative_cluster
