"""
File-backed response store.

Records are appended as JSON lines in the persisted record shape:
    {"userId": ..., "sessionDate": "YYYY-MM-DD", "skillId": ..., "skillName": ...,
     "response": "yes"|"no"|"no-response", "timestamp": <epoch ms>}

Malformed lines are skipped on read. Purging rewrites the file through a
temporary file and an atomic replace.
"""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from loguru import logger

from skillcoach.core.models import ResponseRecord, normalize_date
from skillcoach.storage.base import (
    ResponseStore,
    StorageError,
    StorageUnavailable,
    normalize_dates,
    sort_records,
)


class JsonlResponseStore(ResponseStore):
    """Append-only JSON-lines response log."""

    backend = "jsonl"

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._ready = False
        self._lock = asyncio.Lock()

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def init(self) -> None:
        if self._ready:
            return
        try:
            await asyncio.to_thread(self._touch)
        except OSError as e:
            logger.error(f"Failed to initialize response log at {self.path}: {e}")
            raise StorageUnavailable(f"Cannot open response log {self.path}: {e}") from e
        self._ready = True
        logger.info(f"JSONL response store initialized at {self.path}")

    async def close(self) -> None:
        self._ready = False

    def _touch(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)

    # =========================================================================
    # File I/O (runs in a worker thread)
    # =========================================================================

    def _append_line(self, line: str) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
            f.flush()
            os.fsync(f.fileno())

    def _read_records(self) -> list[ResponseRecord]:
        records = []
        with open(self.path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(ResponseRecord.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed response line {lineno} in {self.path}: {e}")
        return records

    def _rewrite_without(self, user_id: str) -> int:
        kept: list[str] = []
        removed = 0
        with open(self.path, "r", encoding="utf-8") as f:
            for line in f:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    owner = json.loads(stripped).get("userId")
                except (json.JSONDecodeError, AttributeError):
                    owner = None
                if owner == user_id:
                    removed += 1
                else:
                    kept.append(stripped)

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.writelines(line + "\n" for line in kept)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.path)
        return removed

    # =========================================================================
    # Store Operations
    # =========================================================================

    async def save(self, record: ResponseRecord) -> None:
        self._require_ready("save response")
        line = json.dumps(record.to_dict(), ensure_ascii=False)
        async with self._lock:
            try:
                await asyncio.to_thread(self._append_line, line)
            except OSError as e:
                logger.error(f"Failed to save response: {e}")
                raise StorageError(f"Failed to append to {self.path}: {e}") from e
        logger.debug(f"Response saved: {record.skill_id} {record.response.value}")

    async def query_by_date(self, user_id: str, session_date: date | str) -> list[ResponseRecord]:
        if not self._ready:
            logger.warning("JSONL response store not initialized; returning no responses")
            return []
        try:
            day = normalize_date(session_date)
            async with self._lock:
                records = await asyncio.to_thread(self._read_records)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to fetch responses for {user_id} on {session_date}: {e}")
            return []
        return sort_records([r for r in records if r.user_id == user_id and r.session_date == day])

    async def query_by_dates(
        self, user_id: str, session_dates: Sequence[date | str]
    ) -> dict[str, list[ResponseRecord]]:
        """Bucket one read of the log into the requested dates."""
        keys = normalize_dates(session_dates)
        results: dict[str, list[ResponseRecord]] = {key: [] for key in keys}
        if not self._ready:
            logger.warning("JSONL response store not initialized; returning no responses")
            return results
        try:
            async with self._lock:
                records = await asyncio.to_thread(self._read_records)
        except OSError as e:
            logger.warning(f"Failed to fetch responses for {user_id}: {e}")
            return results

        for record in records:
            if record.user_id == user_id and record.session_date in results:
                results[record.session_date].append(record)
        return {key: sort_records(bucket) for key, bucket in results.items()}

    async def purge_user(self, user_id: str) -> int:
        self._require_ready("purge responses")
        async with self._lock:
            try:
                removed = await asyncio.to_thread(self._rewrite_without, user_id)
            except OSError as e:
                logger.error(f"Failed to delete responses: {e}")
                raise StorageError(f"Failed to purge {user_id} from {self.path}: {e}") from e
        logger.info(f"Purged {removed} responses for user {user_id}")
        return removed
