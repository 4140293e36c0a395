"""
Repository ports and their SQLAlchemy implementations.

The service only talks to the ``TaskRepository`` / ``ActivityLogRepository``
protocols, so tests can hand it in-memory fakes. The SQL implementations
open one short-lived session per call from a shared session factory.
"""

from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import sessionmaker

from .domain import ActivityLogEntry, Category, Task, as_utc
from .models import ActivityLogRecord, TaskRecord

TASK_FIELDS = ("title", "description", "category", "due_date")


class TaskRepository(Protocol):
    async def find_all(self) -> List[Task]: ...

    async def find_by_id(self, task_id: str) -> Optional[Task]: ...

    async def insert(self, task: Task) -> str: ...

    async def update_partial(self, task_id: str, fields: Dict[str, Any]) -> int: ...

    async def delete_by_id(self, task_id: str) -> int: ...


class ActivityLogRepository(Protocol):
    async def insert(self, entry: ActivityLogEntry) -> int: ...

    async def find_all_ordered_by_timestamp_desc(self) -> List[ActivityLogEntry]: ...


def _to_task(record: TaskRecord) -> Task:
    return Task(
        id=record.id,
        title=record.title,
        description=record.description or "",
        category=Category(record.category),
        due_date=as_utc(record.due_date),
        timestamp=as_utc(record.timestamp),
    )


def _to_entry(record: ActivityLogRecord) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=record.id,
        message=record.message,
        timestamp=as_utc(record.timestamp),
    )


def _column_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - set(TASK_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    values = dict(fields)
    if isinstance(values.get("category"), Category):
        values["category"] = values["category"].value
    return values


class SqlTaskRepository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def find_all(self) -> List[Task]:
        async with self._session_factory() as session:
            result = await session.execute(select(TaskRecord))
            return [_to_task(record) for record in result.scalars().all()]

    async def find_by_id(self, task_id: str) -> Optional[Task]:
        async with self._session_factory() as session:
            record = await session.get(TaskRecord, task_id)
            return _to_task(record) if record else None

    async def insert(self, task: Task) -> str:
        record = TaskRecord(
            title=task.title,
            description=task.description,
            category=Category(task.category).value,
            due_date=task.due_date,
            timestamp=task.timestamp,
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
            return record.id

    async def update_partial(self, task_id: str, fields: Dict[str, Any]) -> int:
        """Set only the given fields; returns how many rows matched the id"""
        values = _column_values(fields)
        async with self._session_factory() as session:
            if not values:
                result = await session.execute(
                    select(func.count()).select_from(TaskRecord).where(TaskRecord.id == task_id)
                )
                return result.scalar_one()

            result = await session.execute(
                update(TaskRecord).where(TaskRecord.id == task_id).values(**values)
            )
            await session.commit()
            return result.rowcount

    async def delete_by_id(self, task_id: str) -> int:
        async with self._session_factory() as session:
            result = await session.execute(delete(TaskRecord).where(TaskRecord.id == task_id))
            await session.commit()
            return result.rowcount


class SqlActivityLogRepository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def insert(self, entry: ActivityLogEntry) -> int:
        record = ActivityLogRecord(message=entry.message, timestamp=entry.timestamp)
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
            return record.id

    async def find_all_ordered_by_timestamp_desc(self) -> List[ActivityLogEntry]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ActivityLogRecord).order_by(
                    ActivityLogRecord.timestamp.desc(), ActivityLogRecord.id.desc()
                )
            )
            return [_to_entry(record) for record in result.scalars().all()]
