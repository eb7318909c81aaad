"""
Data access for transcription records.

``TranscriptionRepository`` receives an ``AsyncSession`` and calls
``flush()`` rather than ``commit()`` so that transaction boundaries are
controlled by the caller (typically :func:`get_session`).

``RecordStore`` is the document-store collaborator used by the ingestion
pipeline: it owns one transaction per insert.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vidscribe.core.exceptions import PersistenceError, RecordNotFoundError
from vidscribe.core.models import TranscriptionRecordCreate
from vidscribe.services.storage.models_db import TranscriptionRecord

logger = logging.getLogger(__name__)


class TranscriptionRepository:
    """Data-access layer for the ``transcription_records`` table.

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_record(self, data: TranscriptionRecordCreate) -> TranscriptionRecord:
        """Insert a record and return it with its assigned ID."""
        record = TranscriptionRecord(
            video_url=data.video_url,
            transcription=data.transcription,
            tags=list(data.tags),
            created_at=data.created_at,
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def get_record(self, record_id: int) -> TranscriptionRecord:
        """Return a record by ID or raise :class:`RecordNotFoundError`."""
        record = await self._session.get(TranscriptionRecord, record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def list_records(self, limit: int = 20, offset: int = 0) -> list[TranscriptionRecord]:
        """Return records newest first."""
        stmt = (
            select(TranscriptionRecord)
            .order_by(TranscriptionRecord.created_at.desc(), TranscriptionRecord.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class RecordStore:
    """Insert-only document store backed by a pooled session factory.

    Args:
        session_factory: Long-lived ``async_sessionmaker`` created at startup.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, data: TranscriptionRecordCreate) -> str:
        """Persist *data* in its own transaction and return the new ID.

        Raises:
            PersistenceError: If the write or commit fails.
        """
        try:
            async with self._session_factory() as session:
                repo = TranscriptionRepository(session)
                record = await repo.create_record(data)
                await session.commit()
                record_id = record.id
        except Exception as exc:
            logger.exception("Failed to persist transcription record")
            raise PersistenceError("Failed to save transcription record") from exc

        logger.info("Persisted transcription record %s", record_id)
        return str(record_id)
