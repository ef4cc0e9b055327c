import re
import numpy as np

from .color import lab_to_rgb_bytes
from .errors import ConversionError, MismatchedBuffer
from .utils import get_in_bounds

# West, then clockwise around the pixel
EIGHT_NEIGHBORS = ((-1, 0), (-1, -1), (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1))

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


# -------------------------------------------------
# Count labels
# -------------------------------------------------
def count_labels(labels):
    return int(np.unique(np.asarray(labels)).size)


# -------------------------------------------------
# Mean color fill
# -------------------------------------------------
def mean_colors(labels, colors):
    """
    Paint every superpixel with the mean CIELAB color of its pixels.

    Args:
        labels: label per pixel
        colors: (N, 3) CIELAB colors the labels were computed from

    Returns:
        (rgb, count): (N, 3) uint8 sRGB buffer and number of superpixels.
    """
    labels = np.asarray(labels)
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    if labels.size != len(colors):
        raise MismatchedBuffer("mean color")

    unique, inverse = np.unique(labels, return_inverse=True)
    inverse = inverse.reshape(-1)
    counts = np.bincount(inverse, minlength=unique.size).astype(np.float64)
    sums = np.stack(
        [np.bincount(inverse, weights=colors[:, c], minlength=unique.size) for c in range(3)],
        axis=1,
    )

    palette = lab_to_rgb_bytes(sums / counts[:, None])
    return palette[inverse], int(unique.size)


# -------------------------------------------------
# Contours
# -------------------------------------------------
def segment_contours(output, width, height, labels, segment_color):
    """
    Draw superpixel borders into `output` ((N, 3) uint8, modified in place).

    A pixel becomes a border when at least two of its 8 neighbours carry
    a different label and are not themselves border pixels yet. This
    keeps contours about one pixel thick.
    """
    grid = np.asarray(labels).tolist()
    if len(grid) != width * height or len(output) != len(grid):
        raise MismatchedBuffer("contour")

    segment = [False] * len(grid)
    color = np.asarray(segment_color, dtype=np.uint8)

    for y in range(height):
        for x in range(width):
            i = y * width + x
            label = grid[i]
            differing = 0
            for dx, dy in EIGHT_NEIGHBORS:
                is_segment = get_in_bounds(width, height, x + dx, y + dy, segment)
                if is_segment is False and grid[(y + dy) * width + x + dx] != label:
                    differing += 1
            if differing >= 2:
                output[i] = color
                segment[i] = True

    return output


def parse_hex_color(text):
    """'000', 'fff', '#ff8800' -> (r, g, b)."""
    match = _HEX_COLOR.match(text.strip())
    if not match:
        raise ConversionError("Segment color is invalid hex")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(d * 2 for d in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))
