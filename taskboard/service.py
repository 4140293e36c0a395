"""
Task mutation pipeline.

Each mutation runs validate -> persist -> log -> notify. Validation happens
before the store is touched, so rejected requests leave no trace, and the
activity log and broadcast only follow a confirmed store change.

No locking is done here: two concurrent moves of the same task race in the
store and the last write wins.
"""

import logging
from typing import Any, Dict, List, Optional

from .broadcaster import NotificationBroadcaster
from .domain import ActivityLogEntry, Category, Task
from .errors import NotFoundError, StoreError, TaskBoardError, ValidationError
from .repositories import ActivityLogRepository, TaskRepository
from .validation import (
    parse_due_date,
    validate_category,
    validate_description,
    validate_due_date,
    validate_title,
    validate_title_for_update,
)

logger = logging.getLogger(__name__)


def _check(result) -> None:
    is_valid, error = result
    if not is_valid:
        raise ValidationError(error)


class TaskService:
    def __init__(
        self,
        tasks: TaskRepository,
        activity_log: ActivityLogRepository,
        broadcaster: NotificationBroadcaster,
    ):
        self.tasks = tasks
        self.activity_log = activity_log
        self.broadcaster = broadcaster

    async def list_grouped(self) -> Dict[str, List[Task]]:
        """All tasks partitioned by category, in store order"""
        try:
            tasks = await self.tasks.find_all()
        except Exception as e:
            logger.exception("Failed to fetch tasks")
            raise StoreError("Failed to fetch tasks") from e

        grouped: Dict[str, List[Task]] = {category.value: [] for category in Category}
        for task in tasks:
            grouped[Category(task.category).value].append(task)
        return grouped

    async def create(
        self,
        title: Optional[str],
        category: Optional[str],
        description: Optional[str] = None,
        due_date: Any = None,
    ) -> Task:
        """
        Validate and insert a new task, then log and broadcast it.

        There is no rollback: if the insert succeeds but the log append
        fails, the task stays stored, the caller gets "Failed to add task"
        and no broadcast goes out. A client retry will create a duplicate.
        """
        _check(validate_title(title))
        _check(validate_description(description))
        _check(validate_category(category, required=True))
        _check(validate_due_date(due_date))

        task = Task(
            title=title.strip(),
            description=description or "",
            category=Category(category),
            due_date=parse_due_date(due_date) if due_date else None,
        )
        try:
            task.id = await self.tasks.insert(task)
            await self._record(f'Task "{task.title}" added.')
        except Exception as e:
            logger.exception("Failed to add task %r", task.title)
            raise StoreError("Failed to add task") from e

        logger.info("Task %s added to %s", task.id, task.category.value)
        await self.broadcaster.notify_tasks_changed()
        return task

    async def move(self, task_id: str, category: Optional[str]) -> Dict[str, str]:
        """Change only the category of a task (drag and drop)"""
        _check(validate_category(category, required=True))

        try:
            matched = await self.tasks.update_partial(task_id, {"category": Category(category)})
            if not matched:
                raise NotFoundError()
            title = await self._title_of(task_id)
            await self._record(f'Task "{title}" moved to {category}.')
        except TaskBoardError:
            raise
        except Exception as e:
            logger.exception("Failed to move task %s", task_id)
            raise StoreError("Failed to update task category") from e

        logger.info("Task %s moved to %s", task_id, category)
        await self.broadcaster.notify_tasks_changed()
        return {"message": "Task category updated successfully"}

    async def update(
        self,
        task_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
        due_date: Any = None,
    ) -> Dict[str, str]:
        """
        Apply a sparse edit. Each supplied field is validated on its own.

        Only truthy values make it into the update: an empty description or
        a blank title is dropped rather than written, so callers cannot clear
        the description or the due date through this operation. This is
        probably a latent bug, but clients rely on it.
        """
        _check(validate_title_for_update(title))
        _check(validate_description(description))
        _check(validate_category(category, required=False))
        _check(validate_due_date(due_date))

        fields: Dict[str, Any] = {}
        if title and title.strip():
            fields["title"] = title.strip()
        if description:
            fields["description"] = description
        if category:
            fields["category"] = Category(category)
        if due_date:
            fields["due_date"] = parse_due_date(due_date)

        try:
            matched = await self.tasks.update_partial(task_id, fields)
            if not matched:
                raise NotFoundError()
            title_now = await self._title_of(task_id)
            await self._record(f'Task "{title_now}" updated.')
        except TaskBoardError:
            raise
        except Exception as e:
            logger.exception("Failed to update task %s", task_id)
            raise StoreError("Failed to update task") from e

        logger.info("Task %s updated (%s)", task_id, ", ".join(sorted(fields)) or "no fields")
        await self.broadcaster.notify_tasks_changed()
        return {"message": "Task updated successfully"}

    async def delete(self, task_id: str) -> Dict[str, str]:
        try:
            # Delete does not hand back the document, so read the title first.
            task = await self.tasks.find_by_id(task_id)
            deleted = await self.tasks.delete_by_id(task_id)
            if not deleted:
                raise NotFoundError()
            title = task.title if task else task_id
            await self._record(f'Task "{title}" deleted.')
        except TaskBoardError:
            raise
        except Exception as e:
            logger.exception("Failed to delete task %s", task_id)
            raise StoreError("Failed to delete task") from e

        logger.info("Task %s deleted", task_id)
        await self.broadcaster.notify_tasks_changed()
        return {"message": "Task deleted successfully"}

    async def list_activity_log(self) -> List[ActivityLogEntry]:
        try:
            return await self.activity_log.find_all_ordered_by_timestamp_desc()
        except Exception as e:
            logger.exception("Failed to fetch activity log")
            raise StoreError("Failed to fetch activity log") from e

    async def _title_of(self, task_id: str) -> str:
        task = await self.tasks.find_by_id(task_id)
        return task.title if task else task_id

    async def _record(self, message: str) -> None:
        await self.activity_log.insert(ActivityLogEntry(message=message))
