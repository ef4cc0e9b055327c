"""
SNIC - simple non-iterative clustering.

Regions grow outward from their seeds through a min-priority queue keyed
on the joint color/spatial distance. Each pixel is labelled exactly once,
when its cheapest queue entry is popped; stale entries for pixels that
were labelled in the meantime are discarded.

Reference:
    Achanta, R., & Süsstrunk, S. Superpixels and polygons using simple
    non-iterative clustering. CVPR, 2017.
"""

import heapq
import math
from typing import NamedTuple

import numpy as np

from .color import rgb_bytes_to_lab
from .connectivity import fix_isolated_pixels
from .errors import ConversionError, MismatchedBuffer, NanDistance
from .seeds import init_seeds, perturb
from .utils import (
    NEIGHBORS,
    allocate,
    compactness_factor,
    index_in_bounds,
    joint_distance,
    spatial_distance,
    to_u32,
    validate_parameters,
)

UNLABELED = 0


class GrowthElement(NamedTuple):
    """
    Queue entry. Tuples order by distance first, then label, x and y,
    which keeps pops deterministic when distances tie.
    """
    distance: float
    label: int
    x: int
    y: int

    @classmethod
    def create(cls, distance, label, x, y):
        # NaN has no place in a total order; reject it before it reaches the heap
        distance = float(distance)
        if math.isnan(distance):
            raise NanDistance()
        return cls(distance, label, x, y)


def growth_cluster_from_bytes(k, m, width, height, image):
    """
    SNIC over a buffer of interleaved RGB bytes.

    The buffer must hold exactly width * height * 3 bytes.
    """
    if len(image) != width * height * 3:
        raise MismatchedBuffer("snic")
    return growth_cluster(k, m, width, height, rgb_bytes_to_lab(image, width, height))


def growth_cluster(k, m, width, height, colors):
    """
    Calculate SNIC labels.

    Args:
        k:      number of superpixels to find, must not be 0
        m:      compactness, clamped to [1, 20]
        width:  image width, must not be 0
        height: image height, must not be 0
        colors: CIELAB grid, (width * height, 3) or (height, width, 3)

    Returns:
        int64 array of width * height labels, 1-based.
    """
    m, s, colors = validate_parameters(k, m, width, height, colors, "snic")
    factor = compactness_factor(m, s)
    length = len(colors)

    clusters = init_seeds(width, height, s, k, colors)
    for seed in clusters:
        perturb(seed, width, height, colors)

    # The queue loop touches single pixels, plain floats beat numpy scalars
    pixels = colors.tolist()
    labels = allocate(length, UNLABELED, np.int64).tolist()

    # Running sums per label; slot 0 stays empty since labels start at 1
    slots = len(clusters) + 1
    sum_l = [0.0] * slots
    sum_a = [0.0] * slots
    sum_b = [0.0] * slots
    sum_x = [0.0] * slots
    sum_y = [0.0] * slots
    counts = [0] * slots

    queue = [
        GrowthElement.create(0.0, index + 1, cluster.x, cluster.y)
        for index, cluster in enumerate(clusters)
    ]
    heapq.heapify(queue)

    while queue:
        elem = heapq.heappop(queue)
        i = index_in_bounds(width, height, elem.x, elem.y, length)
        if i is None or labels[i] != UNLABELED:
            continue

        label = elem.label
        labels[i] = label

        # Exact running mean, no pixel is ever revisited
        l, a, b = pixels[i]
        sum_l[label] += l
        sum_a[label] += a
        sum_b[label] += b
        sum_x[label] += elem.x
        sum_y[label] += elem.y
        counts[label] += 1

        size = counts[label]
        mean_l = sum_l[label] / size
        mean_a = sum_a[label] / size
        mean_b = sum_b[label] / size
        center_x = to_u32(sum_x[label] / size, ConversionError("Invalid x update coordinate"))
        center_y = to_u32(sum_y[label] / size, ConversionError("Invalid y update coordinate"))

        for dx, dy in NEIGHBORS:
            n_x = elem.x + dx
            n_y = elem.y + dy
            n = index_in_bounds(width, height, n_x, n_y, length)
            if n is None or labels[n] != UNLABELED:
                continue

            n_l, n_a, n_b = pixels[n]
            distance = joint_distance(
                (n_l - mean_l) ** 2 + (n_a - mean_a) ** 2 + (n_b - mean_b) ** 2,
                spatial_distance((n_x, n_y), (center_x, center_y)),
                factor,
            )
            heapq.heappush(queue, GrowthElement.create(distance, label, n_x, n_y))

    return fix_isolated_pixels(width, height, labels)


# Shorter name used by the registry and API
snic = growth_cluster
