from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Category(str, Enum):
    """The three fixed board columns"""

    TODO = "todo"
    IN_PROGRESS = "inProgress"
    DONE = "done"

    @classmethod
    def values(cls):
        return [c.value for c in cls]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes coming back from the store"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@dataclass
class Task:
    title: str
    category: Category
    description: str = ""
    due_date: Optional[datetime] = None
    timestamp: datetime = field(default_factory=utcnow)
    id: Optional[str] = None


@dataclass
class ActivityLogEntry:
    message: str
    timestamp: datetime = field(default_factory=utcnow)
    id: Optional[int] = None
