"""
SQLAlchemy repositories against a throwaway SQLite database.
"""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from taskboard.config import Settings
from taskboard.db import close_db, create_engine, create_session_factory, init_db
from taskboard.domain import ActivityLogEntry, Category, Task
from taskboard.repositories import SqlActivityLogRepository, SqlTaskRepository


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    engine = create_engine(Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'board.db'}"))
    await init_db(engine, retry_delay=0)
    yield create_session_factory(engine)
    await close_db(engine)


@pytest.mark.asyncio
async def test_insert_and_find(session_factory):
    repo = SqlTaskRepository(session_factory)
    due = datetime(2999, 5, 1, 8, 30, tzinfo=timezone.utc)

    task_id = await repo.insert(Task(title="Buy milk", category=Category.TODO, due_date=due))

    assert isinstance(task_id, str) and task_id
    found = await repo.find_by_id(task_id)
    assert found.id == task_id
    assert found.title == "Buy milk"
    assert found.category is Category.TODO
    assert found.description == ""
    assert found.due_date == due
    assert found.timestamp.tzinfo is not None
    assert [t.id for t in await repo.find_all()] == [task_id]


@pytest.mark.asyncio
async def test_find_unknown_id(session_factory):
    assert await SqlTaskRepository(session_factory).find_by_id("nope") is None


@pytest.mark.asyncio
async def test_update_partial_touches_only_given_fields(session_factory):
    repo = SqlTaskRepository(session_factory)
    task_id = await repo.insert(Task(title="Buy milk", category=Category.TODO, description="2l"))

    matched = await repo.update_partial(task_id, {"category": Category.DONE})

    assert matched == 1
    found = await repo.find_by_id(task_id)
    assert found.category is Category.DONE
    assert found.description == "2l"


@pytest.mark.asyncio
async def test_update_partial_counts_matches(session_factory):
    repo = SqlTaskRepository(session_factory)
    task_id = await repo.insert(Task(title="Buy milk", category=Category.TODO))

    assert await repo.update_partial("missing", {"title": "x"}) == 0
    assert await repo.update_partial(task_id, {"category": Category.TODO}) == 1
    assert await repo.update_partial(task_id, {}) == 1
    assert await repo.update_partial("missing", {}) == 0


@pytest.mark.asyncio
async def test_update_partial_rejects_unknown_fields(session_factory):
    repo = SqlTaskRepository(session_factory)
    with pytest.raises(ValueError):
        await repo.update_partial("any", {"timestamp": datetime.now(timezone.utc)})


@pytest.mark.asyncio
async def test_delete_by_id(session_factory):
    repo = SqlTaskRepository(session_factory)
    task_id = await repo.insert(Task(title="Buy milk", category=Category.TODO))

    assert await repo.delete_by_id(task_id) == 1
    assert await repo.delete_by_id(task_id) == 0
    assert await repo.find_all() == []


@pytest.mark.asyncio
async def test_activity_log_newest_first(session_factory):
    repo = SqlActivityLogRepository(session_factory)
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    await repo.insert(ActivityLogEntry(message="first", timestamp=start))
    await repo.insert(ActivityLogEntry(message="third", timestamp=start + timedelta(minutes=2)))
    await repo.insert(ActivityLogEntry(message="second", timestamp=start + timedelta(minutes=1)))

    entries = await repo.find_all_ordered_by_timestamp_desc()

    assert [e.message for e in entries] == ["third", "second", "first"]
    assert entries[0].timestamp == start + timedelta(minutes=2)
