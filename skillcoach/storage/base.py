"""
Response store interface.

A store appends immutable ResponseRecords and returns them per user and
calendar date. Backends are chosen at construction time (see
create_response_store) and share one lifecycle: init() before use,
close() when done.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date

from loguru import logger

from skillcoach.core.models import ResponseRecord, normalize_date


class StorageError(Exception):
    """A response store operation failed."""


class StorageUnavailable(StorageError):
    """The backing medium is not initialized or cannot be used."""


class ResponseStore(ABC):
    """
    Append-only store of skill responses.

    - save: durable append; raises StorageUnavailable before init()
    - query_by_date: records ordered by timestamp; fails closed to []
    - purge_user: irreversible per-user delete
    """

    backend: str = "abstract"

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """Whether init() succeeded and close() has not been called."""

    @abstractmethod
    async def init(self) -> None:
        """Open the backing medium (idempotent)."""

    @abstractmethod
    async def close(self) -> None:
        """Release the backing medium (idempotent)."""

    @abstractmethod
    async def save(self, record: ResponseRecord) -> None:
        """Append one record."""

    @abstractmethod
    async def query_by_date(self, user_id: str, session_date: date | str) -> list[ResponseRecord]:
        """Get a user's records for one date, timestamp ascending."""

    async def query_by_dates(
        self, user_id: str, session_dates: Sequence[date | str]
    ) -> dict[str, list[ResponseRecord]]:
        """
        Get a user's records for several dates, keyed by YYYY-MM-DD.

        Fails closed like query_by_date: dates with no records (or that could
        not be read) map to an empty list.
        """
        results: dict[str, list[ResponseRecord]] = {}
        for key in normalize_dates(session_dates):
            results[key] = await self.query_by_date(user_id, key)
        return results

    @abstractmethod
    async def purge_user(self, user_id: str) -> int:
        """Delete every record for a user. Returns the number removed."""

    async def __aenter__(self) -> ResponseStore:
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_ready(self, operation: str) -> None:
        if not self.is_ready:
            raise StorageUnavailable(
                f"{self.backend} response store not initialized; cannot {operation}"
            )


def normalize_dates(session_dates: Sequence[date | str]) -> list[str]:
    """Normalize date keys, dropping (and logging) any that are not ISO dates."""
    keys = []
    for value in session_dates:
        try:
            keys.append(normalize_date(value))
        except ValueError as e:
            logger.warning(f"Invalid session date {value!r}: {e}")
    return keys


def sort_records(records: list[ResponseRecord]) -> list[ResponseRecord]:
    """Order records by timestamp, keeping insertion order on ties."""
    return sorted(records, key=lambda r: r.timestamp_ms)
