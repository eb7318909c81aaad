"""
Read-only endpoints for stored transcription records.
"""

from fastapi import APIRouter, Query

from vidscribe.core.models import TranscriptionRecordResponse
from vidscribe.services.storage.database import get_session
from vidscribe.services.storage.repository import TranscriptionRepository

router = APIRouter(prefix="/videos", tags=["videos"])


def _to_response(record) -> TranscriptionRecordResponse:
    """Convert an ORM TranscriptionRecord into its API representation."""
    return TranscriptionRecordResponse(
        id=str(record.id),
        video_url=record.video_url,
        transcription=record.transcription,
        tags=list(record.tags or []),
        created_at=record.created_at,
    )


@router.get("", response_model=list[TranscriptionRecordResponse])
async def list_videos(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """List transcription records, newest first."""
    async with get_session() as session:
        repo = TranscriptionRepository(session)
        records = await repo.list_records(limit=limit, offset=offset)
    return [_to_response(r) for r in records]


@router.get("/{record_id}", response_model=TranscriptionRecordResponse)
async def get_video(record_id: int):
    """Return a single transcription record."""
    async with get_session() as session:
        repo = TranscriptionRepository(session)
        record = await repo.get_record(record_id)
    return _to_response(record)
