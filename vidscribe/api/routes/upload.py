"""
Video upload endpoint.

Receives a multipart upload (field ``video``), hands the bytes to the
ingestion pipeline, and returns the stored record. Failures are raised as
``VidScribeError`` and rendered by the global error handlers.
"""

import logging
from pathlib import PurePath

from fastapi import APIRouter, File, UploadFile

from vidscribe.api.dependencies import PipelineDep
from vidscribe.core.exceptions import FileTooLargeError, MissingFileError
from vidscribe.core.models import ErrorResponse, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])

_EXTENSIONS = {
    "video/webm": "webm",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/x-msvideo": "avi",
}


def _upload_filename(video: UploadFile, allowed_formats: list[str]) -> str:
    """Use the client filename, giving it an extension from the content type.

    Browsers send ``blob`` for a Blob appended without a name, so a missing
    or unaccepted suffix is completed from ``Content-Type`` when it maps to
    a known container.
    """
    filename = video.filename or "recorded-video"
    if PurePath(filename).suffix.lstrip(".").lower() in {f.lower() for f in allowed_formats}:
        return filename
    base_type = (video.content_type or "").split(";")[0].strip().lower()
    extension = _EXTENSIONS.get(base_type)
    if extension is None:
        return video.filename or f"{filename}.webm"
    return f"{filename}.{extension}"


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def upload_video(
    pipeline: PipelineDep,
    video: UploadFile | None = File(None),
) -> UploadResponse:
    """Store, transcribe, tag, and persist an uploaded video."""
    if video is None:
        raise MissingFileError()

    limit = pipeline.max_upload_bytes
    if video.size is not None and video.size > limit:
        raise FileTooLargeError(size=video.size, limit=limit)

    # Read at most one byte past the ceiling; the pipeline rejects the overflow
    data = await video.read(limit + 1)
    filename = _upload_filename(video, pipeline.allowed_formats)
    logger.info("Received upload %s (%d bytes, %s)", filename, len(data), video.content_type)

    result = await pipeline.process(data, filename)
    if not result.ok:
        raise result.error
    return UploadResponse(data=result.record)
