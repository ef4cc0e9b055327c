import math
import numpy as np

from .errors import (
    AllocationError,
    InvalidGridInterval,
    InvalidImageDimension,
    InvalidSuperpixelCount,
    MismatchedBuffer,
    ZeroGridInterval,
    ZeroSuperpixelCount,
)

U32_MAX = 2**32 - 1

# Adjacent pixels, clockwise from West: West-North-East-South
NEIGHBORS = ((-1, 0), (0, -1), (1, 0), (0, 1))


# -------------------------------------------------
# Grid arithmetic
# -------------------------------------------------
def grid_interval(width, height, k):
    """
    Superpixel side length `S`.

    S * S is the approximate size of each superpixel in pixels:
    S = sqrt(N / K), N being the pixel count and K the requested
    number of superpixels.
    """
    return math.sqrt((float(width) * float(height)) / float(k))


def div_ceil(lhs, rhs):
    """Integer division rounding towards positive infinity."""
    d, r = divmod(lhs, rhs)
    if r > 0 and rhs > 0:
        return d + 1
    return d


def to_u32(value, error):
    """
    Truncate a float to an unsigned 32-bit integer.

    Raises `error` instead of wrapping or saturating when the value is
    NaN, infinite or outside (-1, 2**32).
    """
    if not math.isfinite(value) or not -1.0 < value < U32_MAX + 1.0:
        raise error
    return int(value)


def clamp_compactness(m):
    return min(max(int(m), 1), 20)


# -------------------------------------------------
# Distance primitives
# -------------------------------------------------
def color_distance(lhs, rhs):
    """
    Squared euclidean distance between CIELAB colors.

    Accepts single triples or (..., 3) arrays; no square root is taken
    because the algorithms only ever compare sums.
    """
    diff = np.asarray(rhs, dtype=np.float64) - np.asarray(lhs, dtype=np.float64)
    return np.sum(diff * diff, axis=-1)


def spatial_distance(lhs, rhs):
    """Squared euclidean distance between two (x, y) points."""
    return (rhs[0] - lhs[0]) ** 2 + (rhs[1] - lhs[1]) ** 2


def compactness_factor(m, s):
    """`(m / S) ** 2`, the weight of the spatial term."""
    return (float(m) / float(s)) ** 2


def joint_distance(color_term, spatial_term, factor):
    return color_term + factor * spatial_term


# -------------------------------------------------
# Bounds-checked grid access
# -------------------------------------------------
def index_in_bounds(width, height, x, y, length):
    """
    Flat row-major index of (x, y), or None when the signed coordinate
    falls outside the image or past the end of the buffer.
    """
    if not (0 <= x < width and 0 <= y < height):
        return None
    i = y * width + x
    if i >= length:
        return None
    return i


def get_in_bounds(width, height, x, y, grid):
    i = index_in_bounds(width, height, x, y, len(grid))
    if i is None:
        return None
    return grid[i]


# -------------------------------------------------
# Buffers and validation
# -------------------------------------------------
def allocate(length, fill_value, dtype):
    """Pre-sized scratch buffer; a failed allocation surfaces as AllocationError."""
    try:
        return np.full(length, fill_value, dtype=dtype)
    except MemoryError as e:
        raise AllocationError() from e


def as_color_grid(colors, width, height, algorithm):
    """
    Flatten a CIELAB grid to (width * height, 3) float64.

    Both (N, 3) and (height, width, 3) layouts are accepted; anything
    else, or a length that does not match the dimensions, is rejected.
    """
    grid = np.asarray(colors, dtype=np.float64)
    if grid.ndim == 3:
        grid = grid.reshape(-1, grid.shape[-1])
    if grid.ndim != 2 or grid.shape[1] != 3 or grid.shape[0] != width * height:
        raise MismatchedBuffer(algorithm)
    return grid


def validate_parameters(k, m, width, height, colors, algorithm):
    """
    Check the clustering inputs before any work is done.

    Returns:
        (m, s, grid): clamped compactness, integer grid interval and the
        flattened color grid.
    """
    m = clamp_compactness(m)

    if k == 0:
        raise ZeroSuperpixelCount()

    if width == 0 or height == 0:
        raise InvalidImageDimension()

    if k >= width * height:
        raise InvalidSuperpixelCount()

    grid = as_color_grid(colors, width, height, algorithm)

    s = to_u32(grid_interval(width, height, k), InvalidGridInterval())
    if s == 0:
        raise ZeroGridInterval()

    return m, s, grid
