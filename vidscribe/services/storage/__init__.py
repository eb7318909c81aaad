"""
Storage module - Record store (async SQLAlchemy).
"""

from vidscribe.services.storage.database import (
    Base,
    close_db,
    get_engine,
    get_session,
    get_session_factory,
    init_db,
    reset_engine,
)
from vidscribe.services.storage.models_db import TranscriptionRecord
from vidscribe.services.storage.repository import RecordStore, TranscriptionRepository

__all__ = [
    "Base",
    "RecordStore",
    "TranscriptionRecord",
    "TranscriptionRepository",
    "close_db",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "reset_engine",
]
