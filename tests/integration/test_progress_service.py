"""
Integration tests for range progress reports over a real store.
"""

from datetime import date

import pytest

from skillcoach.core.models import SelectedSkill
from skillcoach.progress.service import ProgressService, date_window, iter_dates
from skillcoach.storage import InMemoryResponseStore, JsonlResponseStore


ROSTER = [SelectedSkill(skill_id="s1", order=1), SelectedSkill(skill_id="s2", order=2)]


def test_date_window_is_inclusive():
    start, end = date_window(7, today=date(2024, 1, 17))

    assert (start, end) == (date(2024, 1, 11), date(2024, 1, 17))
    assert len(iter_dates(start, end)) == 7


def test_iter_dates_empty_when_reversed():
    assert iter_dates(date(2024, 1, 2), date(2024, 1, 1)) == []


@pytest.mark.asyncio
async def test_load_window_skips_empty_days(make_record):
    store = InMemoryResponseStore()
    await store.init()
    await store.save(make_record("s1", "yes", session_date="2024-01-12"))
    await store.save(make_record("s2", "no", session_date="2024-01-12"))
    await store.save(make_record("s1", "yes", session_date="2024-01-17"))
    await store.save(make_record("s2", "yes", session_date="2024-01-17"))
    await store.save(make_record("s1", "yes", session_date="2024-01-01"))

    daily, summary = await ProgressService(store, ROSTER).load_window("u1", 7, today=date(2024, 1, 17))

    assert [d.date for d in daily] == ["2024-01-12", "2024-01-17"]
    assert [d.success_rate for d in daily] == [50, 100]
    assert summary.avg_success_rate == 75
    assert summary.improvement == 50
    assert summary.days == 2


@pytest.mark.asyncio
async def test_load_range_without_data(make_record):
    store = InMemoryResponseStore()
    await store.init()

    daily, summary = await ProgressService(store, ROSTER).load_range(
        "u1", date(2024, 1, 1), date(2024, 1, 31)
    )

    assert daily == []
    assert summary.days == 0


@pytest.mark.asyncio
async def test_load_day_on_unavailable_store_is_empty():
    day = await ProgressService(InMemoryResponseStore(), ROSTER).load_day("u1", date(2024, 1, 15))

    assert day.date == "2024-01-15"
    assert day.success_rate == 0
    assert day.total_skills == 2


@pytest.mark.asyncio
async def test_load_window_over_jsonl_log(tmp_path, make_record):
    async with JsonlResponseStore(tmp_path / "responses.jsonl") as store:
        await store.save(make_record("s1", "yes", session_date="2024-01-03"))
        await store.save(make_record("s2", "yes", session_date="2024-01-03"))
        await store.save(make_record("s1", "no", session_date="2024-01-20"))

        daily, summary = await ProgressService(store, ROSTER).load_window("u1", 30, today=date(2024, 1, 30))

    assert [(d.date, d.success_rate) for d in daily] == [("2024-01-03", 100), ("2024-01-20", 0)]
    assert summary.improvement == -100
