"""
Pydantic models: the JSON shapes returned by the API.
"""

from pydantic import BaseModel, Field
from typing import List


class SuperpixelResponse(BaseModel):
    algorithm: str
    k: int
    m: int
    width: int
    height: int
    segments: int = Field(ge=0, description="Number of distinct superpixels found")
    elapsed_ms: float = Field(ge=0)
    filename: str = Field(..., description="Suggested name for the rendered image")
    image: str = Field(..., description="Base64-encoded PNG or JPEG")


class LabelsResponse(BaseModel):
    """Raw labels, row-major, one per pixel. SNIC labels start at 1, SLIC at 0."""
    algorithm: str
    width: int
    height: int
    segments: int
    labels: List[int]


class BenchmarkResponse(BaseModel):
    slic_ms: float
    snic_ms: float
