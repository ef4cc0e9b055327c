"""
Superpixel API
──────────────
POST /superpixels         - recibe imagen, regresa imagen renderizada (color medio / contornos)
POST /superpixels/labels  - recibe imagen, regresa el arreglo de etiquetas por pixel
POST /benchmark           - tiempos de SLIC y SNIC sobre la misma imagen
GET  /health              - health check
"""

import logging

from fastapi import FastAPI, UploadFile, File, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from superpixels.config import (
    ALLOWED_ORIGINS,
    DEFAULT_ALGORITHM,
    DEFAULT_ITERATIONS,
    DEFAULT_K,
    DEFAULT_M,
    LOG_LEVEL,
    OUTPUT_FORMAT,
    SEGMENT_COLOR,
)
from superpixels.models import BenchmarkResponse, LabelsResponse, SuperpixelResponse
from superpixels.services.segmentation.errors import AllocationError
from superpixels.services.segmentation.superpixel_segmentator import (
    superpixel_benchmark,
    superpixel_labels,
    superpixel_segmentation,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Superpixel API",
    description="Segmenta imágenes en superpixeles con SLIC y SNIC",
    version="0.1.0",
    docs_url="/docs",   # Swagger UI
    redoc_url="/redoc", # ReDoc
    openapi_url="/openapi.json",
)

# ── CORS ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Health check ──────────────────────────────────────────────
@app.get("/")
def health():
    return {"status": "ok", "service": "Superpixel API"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


async def _read_image(image: UploadFile) -> bytes:
    image_bytes = await image.read()
    if not image_bytes:
        raise HTTPException(status_code=400, detail="No image provided")
    return image_bytes


def _run(label, fn, *args, **kwargs):
    """Invalid input → 400, out of memory → 503, anything else → 500."""
    try:
        return fn(*args, **kwargs)
    except AllocationError as e:
        logger.error("%s ran out of memory: %s", label, e)
        raise HTTPException(status_code=503, detail=str(e))
    except ValueError as e:
        logger.warning("%s rejected: %s", label, e)
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("%s failed", label)
        raise HTTPException(
            status_code=500,
            detail=f"Error computing superpixels: {str(e)}",
        )


# ── Rendered superpixels ─────────────────────────────────────
@app.post("/superpixels", response_model=SuperpixelResponse)
async def superpixels(
    image: UploadFile = File(...),
    algorithm: str = Query(DEFAULT_ALGORITHM, description="snic o slic"),
    k: int = Query(DEFAULT_K, ge=0, le=2**32 - 1, description="Número de superpixeles"),
    m: int = Query(DEFAULT_M, ge=0, le=255, description="Compacidad, se limita a 1-20"),
    iterations: int = Query(DEFAULT_ITERATIONS, ge=0, le=255, description="Iteraciones (SLIC)"),
    mean: bool = Query(True, description="Rellenar cada superpixel con su color medio"),
    segments: bool = Query(False, description="Dibujar contornos"),
    segment_color: str = Query(SEGMENT_COLOR, description="Color hex de los contornos"),
    format: str = Query(OUTPUT_FORMAT, description="png o jpg"),
):
    """
    Recibe una imagen y regresa los superpixeles renderizados.

    - mean=true: cada región pintada con su color medio
    - segments=true: contornos sobre la salida
    """
    image_bytes = await _read_image(image)

    return await run_in_threadpool(
        _run,
        "superpixels",
        superpixel_segmentation,
        image_bytes,
        filename=image.filename,
        algorithm=algorithm,
        k=k,
        m=m,
        iterations=iterations,
        mean=mean,
        segments=segments,
        segment_color=segment_color,
        fmt=format,
    )


# ── Raw labels ───────────────────────────────────────────────
@app.post("/superpixels/labels", response_model=LabelsResponse)
async def superpixels_labels(
    image: UploadFile = File(...),
    algorithm: str = Query(DEFAULT_ALGORITHM),
    k: int = Query(DEFAULT_K, ge=0, le=2**32 - 1),
    m: int = Query(DEFAULT_M, ge=0, le=255),
    iterations: int = Query(DEFAULT_ITERATIONS, ge=0, le=255),
):
    image_bytes = await _read_image(image)

    return await run_in_threadpool(
        _run,
        "labels",
        superpixel_labels,
        image_bytes,
        algorithm=algorithm,
        k=k,
        m=m,
        iterations=iterations,
    )


# ── Benchmark ────────────────────────────────────────────────
@app.post("/benchmark", response_model=BenchmarkResponse)
async def benchmark(
    image: UploadFile = File(...),
    k: int = Query(DEFAULT_K, ge=0, le=2**32 - 1),
    m: int = Query(DEFAULT_M, ge=0, le=255),
    iterations: int = Query(DEFAULT_ITERATIONS, ge=0, le=255),
):
    image_bytes = await _read_image(image)

    return await run_in_threadpool(
        _run, "benchmark", superpixel_benchmark, image_bytes, k=k, m=m, iterations=iterations,
    )
