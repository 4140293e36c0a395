from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .domain import ActivityLogEntry, Task

# Request bodies are deliberately loose: field rules live in
# taskboard.validation so every endpoint reports the same messages.


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[str] = Field(None, alias="dueDate")


class TaskMove(BaseModel):
    category: Optional[str] = None


class TaskUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[str] = Field(None, alias="dueDate")


class TaskResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., serialization_alias="_id")
    title: str
    description: str
    category: str
    due_date: Optional[datetime] = Field(None, serialization_alias="dueDate")
    timestamp: datetime

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            category=task.category.value,
            due_date=task.due_date,
            timestamp=task.timestamp,
        )


class GroupedTasksResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    todo: List[TaskResponse] = []
    in_progress: List[TaskResponse] = Field(default_factory=list, serialization_alias="inProgress")
    done: List[TaskResponse] = []


class ActivityLogResponse(BaseModel):
    id: int = Field(..., serialization_alias="_id")
    message: str
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: ActivityLogEntry) -> "ActivityLogResponse":
        return cls(id=entry.id, message=entry.message, timestamp=entry.timestamp)


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
