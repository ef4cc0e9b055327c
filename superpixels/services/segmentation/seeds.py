"""
Superpixel seed initialization and perturbation.

Seeds are laid out on a grid spaced S pixels apart and then moved to the
lowest-gradient pixel of their 3x3 neighbourhood, which lowers the chance
of starting a cluster on an edge or a noisy pixel.
"""

import sys
from dataclasses import dataclass

import numpy as np

from .errors import ConversionError, InvalidImageIndex, InvalidTotalSeeds, PerturbConversion
from .utils import U32_MAX, color_distance, div_ceil, get_in_bounds, to_u32


@dataclass
class Superpixel:
    """A cluster center: CIELAB color plus pixel coordinates."""
    color: np.ndarray
    x: int = 0
    y: int = 0


def seed_counts(width, height, s, k):
    """Seeds per row and per column for an S-spaced grid of at most k seeds."""
    x_seeds = div_ceil(width, s)
    y_seeds = div_ceil(height, s)

    # div_ceil can overshoot the image
    if s * x_seeds > width:
        x_seeds -= 1
    if s * y_seeds > height:
        y_seeds -= 1

    # Very small or very narrow images would otherwise produce no clusters
    x_seeds = max(x_seeds, 1)
    y_seeds = max(y_seeds, 1)

    # Shrink both axes together so the grid stays roughly square; an axis
    # stops at one seed
    while x_seeds * y_seeds > k:
        x_seeds = max(x_seeds - 1, 1)
        y_seeds = max(y_seeds - 1, 1)

    return x_seeds, y_seeds


def init_seeds(width, height, s, k, colors):
    """
    Initialize the superpixel seed centers.

    `width`, `height`, `s`, and `k` must not be 0. Seeds are returned
    row by row; positions that land outside the image are skipped.
    """
    x_seeds, y_seeds = seed_counts(width, height, s, k)

    # An axis shorter than S holds a single seed, centre it
    half_x = min(s // 2, width // 2)
    half_y = min(s // 2, height // 2)

    # Spread seeds over the full extent instead of bunching at the origin
    x_correction = (float(width) - float(x_seeds) * float(s)) / float(x_seeds)
    y_correction = (float(height) - float(y_seeds) * float(s)) / float(y_seeds)

    if x_seeds * y_seeds > sys.maxsize:
        raise InvalidTotalSeeds()

    seeds = []
    for ydx in range(y_seeds):
        y_correct = to_u32(ydx * y_correction, ConversionError("Could not convert Y correction"))
        y = min(ydx * s + half_y + y_correct, U32_MAX)
        for xdx in range(x_seeds):
            x_correct = to_u32(xdx * x_correction, ConversionError("Could not convert X correction"))
            x = min(xdx * s + half_x + x_correct, U32_MAX)
            i = y * width + x
            if i > sys.maxsize:
                raise InvalidImageIndex()
            if x < width and y < height and i < len(colors):
                seeds.append(Superpixel(np.array(colors[i], dtype=np.float64), x, y))

    return seeds


def perturb(seed, width, height, colors):
    """
    Move `seed` to the lowest gradient position in its 3x3 neighbourhood.

    gradient(x, y) = |I(x+1, y) - I(x-1, y)|^2 + |I(x, y+1) - I(x, y-1)|^2

    Out of bounds neighbours count as the zero color. Ties keep the
    first candidate in scan order (rows outer, columns inner).
    """
    minimum = np.inf
    default = np.zeros(3)

    for ydx in (-1, 0, 1):
        for xdx in (-1, 0, 1):
            cx = seed.x + xdx
            cy = seed.y + ydx
            color = get_in_bounds(width, height, cx, cy, colors)
            if color is None:
                continue

            a = _or_default(get_in_bounds(width, height, cx + 1, cy, colors), default)
            b = _or_default(get_in_bounds(width, height, cx - 1, cy, colors), default)
            c = _or_default(get_in_bounds(width, height, cx, cy + 1, colors), default)
            d = _or_default(get_in_bounds(width, height, cx, cy - 1, colors), default)

            gradient = color_distance(a, b) + color_distance(c, d)
            if gradient < minimum:
                minimum = gradient
                seed.color = np.array(color, dtype=np.float64)
                seed.x = to_u32(cx, PerturbConversion())
                seed.y = to_u32(cy, PerturbConversion())

    return seed


def _or_default(value, default):
    return default if value is None else value
