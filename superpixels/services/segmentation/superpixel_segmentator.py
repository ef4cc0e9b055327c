import base64
import os

import cv2
import numpy as np

from .rendering import parse_hex_color
from .runner import run_benchmark, run_segmentation


def bytes_to_rgb(image_bytes):
    nparr = np.frombuffer(image_bytes, np.uint8)
    img_np = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if img_np is None:
        raise ValueError("Image could not be decoded.")
    return cv2.cvtColor(img_np, cv2.COLOR_BGR2RGB)


def normalize_format(fmt):
    fmt = fmt.strip().lower()
    if fmt in ("jpg", "jpeg"):
        return "jpg"
    if fmt != "png":
        raise ValueError(f"Unsupported output format: {fmt}")
    return fmt


def rgb_to_base64(image_rgb, fmt="png"):
    fmt = normalize_format(fmt)
    bgr = cv2.cvtColor(np.ascontiguousarray(image_rgb, dtype=np.uint8), cv2.COLOR_RGB2BGR)
    if fmt == "jpg":
        ok, buf = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, 90])
    else:
        ok, buf = cv2.imencode(".png", bgr, [cv2.IMWRITE_PNG_COMPRESSION, 9])
    if not ok:
        raise ValueError(f"Could not encode image as {fmt}.")
    return base64.b64encode(buf.tobytes()).decode("utf-8")


# Name the output after the algorithm, k and m used,
# e.g. "photo-snic-1000-10-mean-segments.png"
def generate_filename(source, algorithm, k, m, mean=True, segments=False, fmt="png"):
    stem = os.path.splitext(os.path.basename(source or ""))[0] or "image"
    filename = f"{stem}-{algorithm.lower()}-{k}-{m:02}"
    filename += "-mean" if mean else "-orig"
    if segments:
        filename += "-segments"
    return f"{filename}.{normalize_format(fmt)}"


def superpixel_segmentation(
        image: bytes,
        filename=None,
        algorithm="snic",
        k=1000,
        m=10,
        iterations=None,
        mean=True,
        segments=False,
        segment_color="000",
        fmt="png",
        ) -> dict:
    fmt = normalize_format(fmt)
    img_rgb = bytes_to_rgb(image)

    result = run_segmentation(
        img_rgb,
        algorithm=algorithm,
        k=k,
        m=m,
        iterations=iterations,
        mean=mean,
        segments=segments,
        segment_color=parse_hex_color(segment_color),
    )

    return {
        "algorithm": algorithm.lower(),
        "k": k,
        "m": m,
        "width": img_rgb.shape[1],
        "height": img_rgb.shape[0],
        "segments": result["segments"],
        "elapsed_ms": result["elapsed"] * 1000.0,
        "filename": generate_filename(filename, algorithm, k, m, mean, segments, fmt),
        "image": rgb_to_base64(result["image"], fmt),
    }


def superpixel_labels(image: bytes, algorithm="snic", k=1000, m=10, iterations=None) -> dict:
    img_rgb = bytes_to_rgb(image)
    result = run_segmentation(img_rgb, algorithm=algorithm, k=k, m=m,
                              iterations=iterations, mean=False)
    return {
        "algorithm": algorithm.lower(),
        "width": img_rgb.shape[1],
        "height": img_rgb.shape[0],
        "segments": result["segments"],
        "labels": result["labels"].tolist(),
    }


def superpixel_benchmark(image: bytes, k=1000, m=10, iterations=None) -> dict:
    timings = run_benchmark(bytes_to_rgb(image), k=k, m=m, iterations=iterations)
    return {f"{name}_ms": seconds * 1000.0 for name, seconds in timings.items()}
