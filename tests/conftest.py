"""Shared pytest fixtures for the VidScribe test suite.

Provides mock collaborators for the ingestion pipeline (object storage,
STT, LLM, record store), a test ``Settings`` instance, and an in-memory
SQLite database for repository and API tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from vidscribe.core.config import Settings
from vidscribe.core.models import StoredMedia

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Settings with every required credential filled in."""
    return Settings(
        openai_api_key="sk-test",
        minio_access_key="minio-access",
        minio_secret_key="minio-secret",
        database_url="sqlite+aiosqlite:///:memory:",
        max_upload_bytes=100 * 1024 * 1024,
    )


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def stored_media():
    return StoredMedia(
        url="http://localhost:9000/videos/video-transcriptions/abc.webm",
        object_name="video-transcriptions/abc.webm",
        format="webm",
        bytes=12,
        content_type="video/webm",
    )


@pytest.fixture
def mock_storage(stored_media):
    """Create a mock object storage that accepts every upload.

    Returns:
        AsyncMock: ``upload`` returns ``stored_media``; ``download`` returns bytes.
    """
    from vidscribe.services.media.base import MediaStorage

    storage = AsyncMock(spec=MediaStorage)
    storage.upload.return_value = stored_media
    storage.download.return_value = b"stored-bytes"
    return storage


@pytest.fixture
def mock_stt():
    """Create a mock STT provider returning a short transcription."""
    from vidscribe.services.transcription.base import BaseSTT

    stt = AsyncMock(spec=BaseSTT)
    stt.transcribe.return_value = "We talked about music at the live interview."
    return stt


@pytest.fixture
def mock_llm():
    """Create a mock LLM provider replying with comma-separated tags."""
    from vidscribe.services.llm.base import BaseLLM

    llm = AsyncMock(spec=BaseLLM)
    llm.complete.return_value = "music, live, interview"
    return llm


@pytest.fixture
def mock_records():
    """Create a mock record store that assigns ID ``"1"``."""
    from vidscribe.services.storage.repository import RecordStore

    records = AsyncMock(spec=RecordStore)
    records.insert.return_value = "1"
    return records


@pytest.fixture
def sample_video_bytes():
    """A small fake WebM payload (EBML magic + filler)."""
    return b"\x1a\x45\xdf\xa3" + b"\x00" * 1020


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with tables, dispose after test."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from vidscribe.services.storage import models_db  # noqa: F401
    from vidscribe.services.storage.database import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    from sqlalchemy.ext.asyncio import async_sessionmaker

    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Yield an AsyncSession bound to the test engine; rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def repository(db_session):
    """Return a TranscriptionRepository bound to the test session."""
    from vidscribe.services.storage.repository import TranscriptionRepository

    return TranscriptionRepository(db_session)


@pytest.fixture
def now():
    return datetime.now(UTC)
