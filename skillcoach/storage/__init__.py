"""
Response storage backends.

Backends are selected once, at construction time, from settings:
    memory -> InMemoryResponseStore
    jsonl  -> JsonlResponseStore (settings.responses_file)
    sqlite -> SqlResponseStore (settings.database_url)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from skillcoach.storage.base import ResponseStore, StorageError, StorageUnavailable
from skillcoach.storage.jsonl import JsonlResponseStore
from skillcoach.storage.memory import InMemoryResponseStore
from skillcoach.storage.sql import SqlResponseStore

if TYPE_CHECKING:
    from config import Settings


def create_response_store(settings: Settings) -> ResponseStore:
    """Build the configured response store (not yet initialized)."""
    if settings.store_backend == "memory":
        return InMemoryResponseStore()
    if settings.store_backend == "jsonl":
        return JsonlResponseStore(settings.responses_file)
    if settings.store_backend == "sqlite":
        return SqlResponseStore(settings.database_url, echo=settings.log_level == "DEBUG")
    raise ValueError(f"Unknown store backend: {settings.store_backend!r}")


__all__ = [
    "InMemoryResponseStore",
    "JsonlResponseStore",
    "ResponseStore",
    "SqlResponseStore",
    "StorageError",
    "StorageUnavailable",
    "create_response_store",
]
