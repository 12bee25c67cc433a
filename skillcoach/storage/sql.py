"""
SQL-backed response store (SQLAlchemy async).

Defaults to an embedded SQLite file through aiosqlite; any async SQLAlchemy
URL works. The engine is owned by the store instance and lives from init()
to close().
"""

from __future__ import annotations

from datetime import date

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from skillcoach.core.models import ResponseRecord, normalize_date
from skillcoach.db.database import create_engine_for, create_session_factory, init_db, session_scope
from skillcoach.db.models import ResponseRow
from skillcoach.storage.base import ResponseStore, StorageError, StorageUnavailable


class SqlResponseStore(ResponseStore):
    """Response log in a relational `responses` table."""

    backend = "sql"

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_ready(self) -> bool:
        return self._factory is not None

    async def init(self) -> None:
        if self._factory is not None:
            return
        engine = None
        try:
            engine = create_engine_for(self.database_url, echo=self.echo)
            await init_db(engine)
        except (SQLAlchemyError, OSError, ImportError) as e:
            logger.error(f"Failed to initialize response database: {e}")
            if engine is not None:
                await engine.dispose()
            raise StorageUnavailable(f"Response database unavailable: {e}") from e

        self._engine = engine
        self._factory = create_session_factory(engine)
        logger.info("Response database initialized")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Response database closed")
        self._engine = None
        self._factory = None

    async def save(self, record: ResponseRecord) -> None:
        self._require_ready("save response")
        try:
            async with session_scope(self._factory) as session:
                session.add(ResponseRow.from_record(record))
        except SQLAlchemyError as e:
            logger.error(f"Failed to save response: {e}")
            raise StorageError(f"Failed to save response: {e}") from e
        logger.debug(f"Response saved: {record.skill_id} {record.response.value}")

    async def query_by_date(self, user_id: str, session_date: date | str) -> list[ResponseRecord]:
        if self._factory is None:
            logger.warning("Response database not initialized; returning no responses")
            return []

        try:
            day = normalize_date(session_date)
            async with session_scope(self._factory) as session:
                result = await session.execute(
                    select(ResponseRow)
                    .where(ResponseRow.user_id == user_id, ResponseRow.session_date == day)
                    .order_by(ResponseRow.timestamp.asc(), ResponseRow.id.asc())
                )
                rows = result.scalars().all()
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(f"Failed to fetch responses for {user_id} on {session_date}: {e}")
            return []

        records = []
        for row in rows:
            try:
                records.append(row.to_record())
            except ValueError as e:
                logger.warning(f"Skipping response row {row.id}: {e}")
        return records

    async def purge_user(self, user_id: str) -> int:
        self._require_ready("purge responses")
        try:
            async with session_scope(self._factory) as session:
                result = await session.execute(delete(ResponseRow).where(ResponseRow.user_id == user_id))
                removed = result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete responses: {e}")
            raise StorageError(f"Failed to purge responses for {user_id}: {e}") from e
        logger.info(f"Purged {removed} responses for user {user_id}")
        return removed
