import uuid

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

from .domain import utcnow

Base = declarative_base()


def new_task_id() -> str:
    return uuid.uuid4().hex


class TaskRecord(Base):
    __tablename__ = "tasks"

    id = Column(String(32), primary_key=True, default=new_task_id)
    title = Column(String(50), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(16), nullable=False, index=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<TaskRecord(id={self.id}, title='{self.title}', category='{self.category}')>"


class ActivityLogRecord(Base):
    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f"<ActivityLogRecord(id={self.id}, message='{self.message}')>"
