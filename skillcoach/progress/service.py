"""
Progress Service: loads response records per date and summarizes them.

Range reports fetch every date in the window with one query_by_dates call;
backends without a bulk read fall back to one query_by_date per date.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

from loguru import logger

from skillcoach.core.models import DailyProgress, SelectedSkill, normalize_date, utc_today
from skillcoach.progress.aggregator import RangeSummary, summarize_day, summarize_range
from skillcoach.storage.base import ResponseStore


def date_window(days: int, today: date | None = None) -> tuple[date, date]:
    """Inclusive (start, end) covering the last `days` days ending today."""
    end = today or utc_today()
    return end - timedelta(days=max(1, days) - 1), end


def iter_dates(start: date, end: date) -> list[date]:
    """Every calendar date from start to end inclusive (empty if start > end)."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


class ProgressService:
    """Builds daily and range progress reports for one roster."""

    def __init__(self, store: ResponseStore, roster: Sequence[SelectedSkill] = ()):
        self.store = store
        self.roster = list(roster)

    async def load_day(self, user_id: str, day: date | str) -> DailyProgress:
        """Summarize one date. Missing data and query failures both read as empty."""
        key = normalize_date(day)
        records = await self.store.query_by_date(user_id, key)
        return summarize_day(records, self.roster, session_date=key)

    async def load_range(
        self, user_id: str, start: date, end: date
    ) -> tuple[list[DailyProgress], RangeSummary]:
        """
        Summarize every date in [start, end] that has responses.

        Returns:
            (daily summaries in date order, rollup over those days)
        """
        keys = [day.isoformat() for day in iter_dates(start, end)]
        by_date = await self.store.query_by_dates(user_id, keys)

        daily: list[DailyProgress] = []
        for key in keys:
            records = by_date.get(key, [])
            if not records:
                continue
            daily.append(summarize_day(records, self.roster, session_date=key))

        logger.debug(f"Loaded {len(daily)} days with data for {user_id} ({start} to {end})")
        return daily, summarize_range(daily)

    async def load_window(
        self, user_id: str, days: int, today: date | None = None
    ) -> tuple[list[DailyProgress], RangeSummary]:
        """Summarize the last `days` days ending today."""
        start, end = date_window(days, today)
        return await self.load_range(user_id, start, end)
