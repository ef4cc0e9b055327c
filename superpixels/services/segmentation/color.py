"""
sRGB <-> CIELAB conversion for the clustering code.

Distances are measured in CIELAB (D65, 2 degree observer), where
euclidean distance roughly tracks perceived color difference.
"""

import numpy as np
from skimage import color as skcolor


def rgb_bytes_to_lab(raw, width, height):
    """Interleaved 8-bit RGB (bytes or uint8 array) -> (N, 3) float64 CIELAB."""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        rgb = np.frombuffer(raw, dtype=np.uint8)
    else:
        rgb = np.asarray(raw, dtype=np.uint8)
    rgb = rgb.reshape(height, width, 3)
    return skcolor.rgb2lab(rgb).reshape(-1, 3)


def lab_to_rgb_bytes(lab):
    """(N, 3) CIELAB -> (N, 3) uint8 sRGB, clipped to the displayable range."""
    lab = np.asarray(lab, dtype=np.float64).reshape(-1, 1, 3)
    rgb = skcolor.lab2rgb(lab).reshape(-1, 3)
    return np.clip(np.round(rgb * 255.0), 0, 255).astype(np.uint8)
