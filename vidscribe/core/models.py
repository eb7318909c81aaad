"""
Pydantic v2 request / response models used across the API layer.

Response field names follow the JSON contract consumed by the upload
client (``videoUrl``, ``createdAt``) through field aliases.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Collaborator results
# ---------------------------------------------------------------------------


class StoredMedia(BaseModel):
    """Result of an object-storage upload."""

    url: str
    object_name: str
    format: str
    bytes: int
    content_type: str = "application/octet-stream"


# ---------------------------------------------------------------------------
# Transcription records
# ---------------------------------------------------------------------------


class TranscriptionRecordCreate(BaseModel):
    """Document written once per successful ingestion."""

    video_url: str
    transcription: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime


class TranscriptionRecordResponse(BaseModel):
    """Public projection of a stored transcription record."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    video_url: str = Field(alias="videoUrl")
    transcription: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")


class UploadResponse(BaseModel):
    """POST /upload success envelope."""

    success: bool = True
    message: str = "Upload successful"
    data: TranscriptionRecordResponse


class ErrorResponse(BaseModel):
    """Failure envelope produced by the error handlers."""

    success: bool = False
    error: str
    code: str
    timestamp: datetime
