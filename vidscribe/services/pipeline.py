"""Upload ingestion pipeline.

Runs one uploaded video through four strictly sequential steps::

    store -> transcribe -> tag -> persist

Each step fails with its own ``VidScribeError`` subclass and the first
failure ends the run. A record is only persisted once both the
transcription and the tags exist. Nothing is rolled back when a later
step fails: the stored object and the AI calls are already paid for.

Usage::

    pipeline = IngestionPipeline(storage, stt, tagger, records, settings)
    result = await pipeline.process(data, "clip.webm")
    if not result.ok:
        raise result.error
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from vidscribe.core.config import Settings
from vidscribe.core.exceptions import (
    FileTooLargeError,
    MissingFileError,
    PersistenceError,
    StorageError,
    TaggingError,
    TranscriptionError,
    VidScribeError,
)
from vidscribe.core.models import (
    StoredMedia,
    TranscriptionRecordCreate,
    TranscriptionRecordResponse,
)
from vidscribe.services.media.base import MediaStorage
from vidscribe.services.storage.repository import RecordStore
from vidscribe.services.tagging import TagGenerator
from vidscribe.services.transcription.base import BaseSTT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of one ingestion run: a record or the failure that stopped it."""

    record: TranscriptionRecordResponse | None = None
    error: VidScribeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, record: TranscriptionRecordResponse) -> "PipelineResult":
        return cls(record=record)

    @classmethod
    def failure(cls, error: VidScribeError) -> "PipelineResult":
        return cls(error=error)


class IngestionPipeline:
    """Store, transcribe, tag, and persist one uploaded video.

    Args:
        storage: Object storage for the raw media.
        stt: Speech-to-text provider.
        tagger: Tag generator wrapping an LLM.
        records: Insert-only record store.
        settings: Upload ceiling, storage folder, allowed formats, language.
    """

    def __init__(
        self,
        storage: MediaStorage,
        stt: BaseSTT,
        tagger: TagGenerator,
        records: RecordStore,
        settings: Settings,
    ) -> None:
        self._storage = storage
        self._stt = stt
        self._tagger = tagger
        self._records = records
        self._settings = settings

    @property
    def max_upload_bytes(self) -> int:
        return self._settings.max_upload_bytes

    @property
    def allowed_formats(self) -> list[str]:
        return self._settings.allowed_formats

    async def process(self, data: bytes, filename: str) -> PipelineResult:
        """Run the full pipeline; never raises ``VidScribeError``."""
        try:
            record = await self._run(data, filename)
        except VidScribeError as exc:
            logger.warning("Ingestion of %s failed: %s (%s)", filename, exc.detail, exc.code)
            return PipelineResult.failure(exc)
        return PipelineResult.success(record)

    def validate(self, data: bytes) -> None:
        """Reject empty and oversized uploads before any remote call."""
        if not data:
            raise MissingFileError("Uploaded video file is empty")
        limit = self._settings.max_upload_bytes
        if len(data) > limit:
            raise FileTooLargeError(size=len(data), limit=limit)

    async def _run(self, data: bytes, filename: str) -> TranscriptionRecordResponse:
        self.validate(data)
        stored = await self._store(data, filename)
        transcription = await self._transcribe(stored, data, filename)
        tags = await self._tag(transcription)
        created_at = datetime.now(UTC)
        record_id = await self._persist(
            TranscriptionRecordCreate(
                video_url=stored.url,
                transcription=transcription,
                tags=tags,
                created_at=created_at,
            )
        )
        return TranscriptionRecordResponse(
            id=record_id,
            video_url=stored.url,
            transcription=transcription,
            tags=tags,
            created_at=created_at,
        )

    async def _store(self, data: bytes, filename: str) -> StoredMedia:
        logger.info("Storing %s (%d bytes)", filename, len(data))
        try:
            return await self._storage.upload(
                data,
                filename,
                folder=self._settings.storage_folder,
                allowed_formats=self._settings.allowed_formats,
            )
        except StorageError:
            raise
        except Exception as exc:
            logger.exception("Storing %s failed", filename)
            raise StorageError("Failed to upload video to storage") from exc

    async def _transcribe(self, stored: StoredMedia, data: bytes, filename: str) -> str:
        media = data
        if self._settings.transcribe_from_storage:
            try:
                media = await self._storage.download(stored)
            except StorageError:
                raise
            except Exception as exc:
                logger.exception("Reading back %s failed", stored.object_name)
                raise StorageError("Failed to read video back from storage") from exc

        logger.info("Transcribing %s", stored.object_name)
        try:
            text = await self._stt.transcribe(
                media,
                filename,
                language=self._settings.transcription_language,
                response_format="text",
            )
        except TranscriptionError:
            raise
        except Exception as exc:
            logger.exception("Transcribing %s failed", stored.object_name)
            raise TranscriptionError("Failed to generate transcription") from exc

        if not text or not text.strip():
            raise TranscriptionError("Failed to generate transcription")
        return text.strip()

    async def _tag(self, transcription: str) -> list[str]:
        logger.info("Generating tags for %d characters of transcription", len(transcription))
        try:
            return await self._tagger.generate(transcription)
        except TaggingError:
            raise
        except Exception as exc:
            logger.exception("Tag generation failed")
            raise TaggingError("Failed to generate tags") from exc

    async def _persist(self, data: TranscriptionRecordCreate) -> str:
        try:
            return await self._records.insert(data)
        except PersistenceError:
            raise
        except Exception as exc:
            logger.exception("Persisting transcription record failed")
            raise PersistenceError("Failed to save transcription record") from exc
