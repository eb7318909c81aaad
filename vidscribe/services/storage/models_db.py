"""
SQLAlchemy ORM models for the VidScribe schema.

Tables: ``transcription_records``.
"""

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from vidscribe.services.storage.database import Base


class TranscriptionRecord(Base):
    """One transcribed and tagged video. Written once, never updated."""

    __tablename__ = "transcription_records"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    video_url: Mapped[str] = mapped_column(String(1024))
    transcription: Mapped[str] = mapped_column(Text)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC), index=True
    )

    def __repr__(self) -> str:
        return f"<TranscriptionRecord id={self.id} tags={self.tags!r}>"
