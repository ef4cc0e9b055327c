import logging
import time

import numpy as np

from .color import rgb_bytes_to_lab
from .rendering import count_labels, mean_colors, segment_contours
from .segmentation_strategies import SEGMENT_REGISTRY, get_strategy

logger = logging.getLogger(__name__)


# -------------------------------------------------
# Single run
# -------------------------------------------------
def run_segmentation(
    image_rgb,
    algorithm="snic",
    k=1000,
    m=10,
    iterations=None,
    mean=True,
    segments=False,
    segment_color=(0, 0, 0),
):
    """
    Cluster an RGB image and render the requested output.

    Args:
        image_rgb:     (H, W, 3) uint8 RGB image
        algorithm:     registry name, "snic" or "slic"
        mean:          fill each superpixel with its mean color; when
                       False the original pixels are kept
        segments:      draw superpixel contours on top of the output
        segment_color: RGB contour color

    Returns:
        dict with labels, output image (H, W, 3), segment count and
        elapsed clustering time in seconds.
    """
    height, width = image_rgb.shape[:2]
    strategy = get_strategy(algorithm)
    lab = rgb_bytes_to_lab(image_rgb, width, height)

    t0 = time.perf_counter()
    labels = strategy.segment(lab, width, height, k, m, iterations)
    elapsed = time.perf_counter() - t0

    if mean:
        output, num_segments = mean_colors(labels, lab)
    else:
        output = np.ascontiguousarray(image_rgb, dtype=np.uint8).reshape(-1, 3).copy()
        num_segments = count_labels(labels)

    if segments:
        segment_contours(output, width, height, labels, segment_color)

    logger.info(
        "%s: k=%d m=%d %dx%d -> %d segments in %.3fs",
        algorithm.upper(), k, m, width, height, num_segments, elapsed,
    )

    return {
        "labels": labels,
        "image": output.reshape(height, width, 3),
        "segments": num_segments,
        "elapsed": elapsed,
    }


# -------------------------------------------------
# Benchmark every registered algorithm
# -------------------------------------------------
def run_benchmark(image_rgb, k=1000, m=10, iterations=None):
    """Time each registered algorithm on the same input, in seconds."""
    height, width = image_rgb.shape[:2]
    lab = rgb_bytes_to_lab(image_rgb, width, height)

    timings = {}
    for name in sorted(SEGMENT_REGISTRY):
        t0 = time.perf_counter()
        SEGMENT_REGISTRY[name].segment(lab, width, height, k, m, iterations)
        timings[name] = time.perf_counter() - t0
        logger.info("%s: %.3fs", name.upper(), timings[name])

    return timings
