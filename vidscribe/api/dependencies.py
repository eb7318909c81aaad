"""FastAPI dependency providers.

Long-lived collaborators are built once in the application lifespan and
kept on ``app.state``; request handlers receive them through these
providers, which tests replace via ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from vidscribe.core.config import Settings
from vidscribe.services.llm import create_llm
from vidscribe.services.media import create_media_storage
from vidscribe.services.pipeline import IngestionPipeline
from vidscribe.services.storage import get_session_factory
from vidscribe.services.storage.repository import RecordStore
from vidscribe.services.tagging import TagGenerator
from vidscribe.services.transcription import create_stt


def build_pipeline(settings: Settings) -> IngestionPipeline:
    """Wire the ingestion pipeline from settings (called once at startup)."""
    storage = create_media_storage(settings)
    storage.ensure_bucket_exists()
    return IngestionPipeline(
        storage=storage,
        stt=create_stt(settings.stt_provider),
        tagger=TagGenerator(create_llm(settings.llm_provider)),
        records=RecordStore(get_session_factory()),
        settings=settings,
    )


def get_pipeline(request: Request) -> IngestionPipeline:
    """Return the pipeline built during application startup."""
    return request.app.state.pipeline


PipelineDep = Annotated[IngestionPipeline, Depends(get_pipeline)]
