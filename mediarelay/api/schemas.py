"""
Pydantic schemas for API response models.
"""

from pydantic import BaseModel, Field
from typing import Optional


# ---------------------------------------------------------------------------
# Success responses
# ---------------------------------------------------------------------------

class BratResponse(BaseModel):
    """Uploaded brat image."""
    success: bool = True
    result: str = Field(..., description="Public URL of the uploaded JPEG")


class Ytmp3Response(BaseModel):
    """Uploaded YouTube audio plus video metadata."""
    success: bool = True
    title: str
    thumbnail: Optional[str] = Field(default=None, description="Highest-resolution thumbnail URL")
    audio_url: str = Field(..., description="Public URL of the uploaded audio")
    size: str = Field(..., description="Audio size, e.g. '3.41 MB'")


# ---------------------------------------------------------------------------
# Error responses
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    """Client errors on both endpoints; server errors on /ytmp3."""
    success: bool = False
    message: str


class BratErrorResponse(BaseModel):
    """Server errors on /brat."""
    error: bool = True
    message: str


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    service: str = "mediarelay"
