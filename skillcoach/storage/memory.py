"""In-process response store for tests and throwaway sessions."""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from loguru import logger

from skillcoach.core.models import ResponseRecord, normalize_date
from skillcoach.storage.base import ResponseStore, sort_records


class InMemoryResponseStore(ResponseStore):
    """Keeps records in a dict keyed by user id. Nothing survives the process."""

    backend = "memory"

    def __init__(self) -> None:
        self._records: dict[str, list[ResponseRecord]] | None = None

    @property
    def is_ready(self) -> bool:
        return self._records is not None

    async def init(self) -> None:
        if self._records is None:
            self._records = defaultdict(list)
            logger.info("In-memory response store initialized")

    async def close(self) -> None:
        self._records = None

    async def save(self, record: ResponseRecord) -> None:
        self._require_ready("save response")
        self._records[record.user_id].append(record)
        logger.debug(f"Response saved: {record.skill_id} {record.response.value}")

    async def query_by_date(self, user_id: str, session_date: date | str) -> list[ResponseRecord]:
        if self._records is None:
            logger.warning("In-memory response store not initialized; returning no responses")
            return []
        try:
            day = normalize_date(session_date)
        except ValueError as e:
            logger.warning(f"Invalid session date {session_date!r}: {e}")
            return []
        return sort_records([r for r in self._records.get(user_id, []) if r.session_date == day])

    async def purge_user(self, user_id: str) -> int:
        self._require_ready("purge responses")
        removed = len(self._records.pop(user_id, []))
        logger.info(f"Purged {removed} responses for user {user_id}")
        return removed
