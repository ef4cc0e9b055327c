"""
Configuration: reads from environment variables.
Only the HTTP service reads these; the clustering functions take
every parameter explicitly.
"""
from dotenv import load_dotenv
load_dotenv()

import os

# Clustering defaults for requests that leave them out
DEFAULT_K = int(os.getenv("SUPERPIXEL_K", "1000"))
DEFAULT_M = int(os.getenv("SUPERPIXEL_M", "10"))
DEFAULT_ITERATIONS = int(os.getenv("SUPERPIXEL_ITERATIONS", "10"))
DEFAULT_ALGORITHM = os.getenv("SUPERPIXEL_ALGORITHM", "snic")

# Rendering
SEGMENT_COLOR = os.getenv("SEGMENT_COLOR", "000")
OUTPUT_FORMAT = os.getenv("OUTPUT_FORMAT", "png")

# CORS, local dev frontends by default
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000"
).split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
