"""
Storage module - row store for transcripts and object stores for audio.
"""

from speechpad.services.storage.database import (
    Base,
    close_db,
    get_engine,
    get_session,
    init_db,
    reset_engine,
)
from speechpad.services.storage.models_db import Transcription
from speechpad.services.storage.object_store import (
    BaseObjectStore,
    LocalDiskStore,
    StoredObject,
    SupabaseStore,
)
from speechpad.services.storage.repository import TranscriptionRepository

__all__ = [
    "Base",
    "BaseObjectStore",
    "LocalDiskStore",
    "StoredObject",
    "SupabaseStore",
    "Transcription",
    "TranscriptionRepository",
    "close_db",
    "get_engine",
    "get_session",
    "init_db",
    "reset_engine",
]
