"""Integration test fixtures for VidScribe.

Provides an async HTTP client against a fresh FastAPI app. The ingestion
pipeline is injected through ``dependency_overrides`` with mocked object
storage and AI providers, and a real ``RecordStore`` on in-memory SQLite.
The lifespan is not run, so no real credentials or services are needed.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from vidscribe.api.app import create_app
from vidscribe.api.dependencies import get_pipeline
from vidscribe.services.pipeline import IngestionPipeline
from vidscribe.services.storage import database
from vidscribe.services.storage.repository import RecordStore
from vidscribe.services.tagging import TagGenerator


@pytest.fixture
def pipeline(mock_storage, mock_stt, mock_llm, session_factory, settings):
    return IngestionPipeline(
        storage=mock_storage,
        stt=mock_stt,
        tagger=TagGenerator(mock_llm),
        records=RecordStore(session_factory),
        settings=settings,
    )


@pytest.fixture
def app(pipeline):
    """Create a fresh FastAPI application with the test pipeline."""
    application = create_app()
    application.dependency_overrides[get_pipeline] = lambda: pipeline
    return application


@pytest.fixture
async def async_client(app, db_engine):
    """AsyncClient backed by the in-memory test engine.

    Injects the test engine into the database module so that the read
    routes use the same in-memory SQLite as the pipeline's record store.
    """
    database._engine = db_engine
    database._session_factory = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    database.reset_engine()
