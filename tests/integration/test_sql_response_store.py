"""
Integration tests for the SQLite-backed response store.

Runs against a real database file under tmp_path through aiosqlite.
"""

import pytest
from sqlalchemy import text

from skillcoach.db.database import get_async_url, session_scope
from skillcoach.storage import SqlResponseStore, StorageUnavailable


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def db_url(tmp_path):
    """SQLite URL in a not-yet-existing subdirectory."""
    return f"sqlite+aiosqlite:///{tmp_path / 'db' / 'responses.db'}"


# ============================================================================
# Tests
# ============================================================================


def test_get_async_url():
    assert get_async_url("sqlite:///x.db") == "sqlite+aiosqlite:///x.db"
    assert get_async_url("postgresql://h/db") == "postgresql+asyncpg://h/db"
    assert get_async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


@pytest.mark.asyncio
async def test_init_creates_database_file(tmp_path, db_url):
    async with SqlResponseStore(db_url) as store:
        assert store.is_ready

    assert (tmp_path / "db" / "responses.db").exists()


@pytest.mark.asyncio
async def test_save_and_query_round_trip(db_url, make_record):
    async with SqlResponseStore(db_url) as store:
        await store.save(make_record("s2", "no", timestamp_ms=200))
        await store.save(make_record("s1", "yes", timestamp_ms=100))
        await store.save(make_record("s1", "no-response", timestamp_ms=300))
        await store.save(make_record("s1", "yes", user_id="other"))

        records = await store.query_by_date("u1", "2024-01-15")

    assert [(r.skill_id, r.response.value, r.timestamp_ms) for r in records] == [
        ("s1", "yes", 100),
        ("s2", "no", 200),
        ("s1", "no-response", 300),
    ]
    assert records[0].skill_name == "S1"


@pytest.mark.asyncio
async def test_records_survive_reopen(db_url, make_record):
    async with SqlResponseStore(db_url) as store:
        await store.save(make_record("s1", "yes"))

    async with SqlResponseStore(db_url) as store:
        assert len(await store.query_by_date("u1", "2024-01-15")) == 1


@pytest.mark.asyncio
async def test_columns_use_record_field_names(db_url, make_record):
    async with SqlResponseStore(db_url) as store:
        await store.save(make_record("s1", "yes", timestamp_ms=55))
        async with session_scope(store._factory) as session:
            result = await session.execute(
                text('SELECT "userId", "sessionDate", "skillId", "response", "timestamp" FROM responses')
            )
            row = result.one()

    assert tuple(row) == ("u1", "2024-01-15", "s1", "yes", 55)


@pytest.mark.asyncio
async def test_unknown_stored_values_are_skipped(db_url, make_record):
    async with SqlResponseStore(db_url) as store:
        await store.save(make_record("s1", "yes", timestamp_ms=1))
        async with session_scope(store._factory) as session:
            await session.execute(
                text(
                    'INSERT INTO responses ("userId", "sessionDate", "skillId", "skillName", "response", "timestamp") '
                    "VALUES ('u1', '2024-01-15', 's2', '', 'maybe', 2)"
                )
            )

        records = await store.query_by_date("u1", "2024-01-15")

    assert [r.skill_id for r in records] == ["s1"]


@pytest.mark.asyncio
async def test_purge_user(db_url, make_record):
    async with SqlResponseStore(db_url) as store:
        await store.save(make_record("s1", "yes"))
        await store.save(make_record("s2", "no", session_date="2024-01-16"))
        await store.save(make_record("s1", "yes", user_id="keep"))

        assert await store.purge_user("u1") == 2
        assert await store.query_by_date("u1", "2024-01-16") == []
        assert len(await store.query_by_date("keep", "2024-01-15")) == 1


@pytest.mark.asyncio
async def test_unopenable_database_is_unavailable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = SqlResponseStore(f"sqlite+aiosqlite:///{blocker / 'responses.db'}")

    with pytest.raises(StorageUnavailable):
        await store.init()
    assert store.is_ready is False


@pytest.mark.asyncio
async def test_query_before_init_is_empty(db_url):
    assert await SqlResponseStore(db_url).query_by_date("u1", "2024-01-15") == []
