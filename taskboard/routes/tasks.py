from fastapi import APIRouter, Depends, status

from ..dependencies import get_task_service
from ..schemas import (
    ErrorResponse,
    GroupedTasksResponse,
    MessageResponse,
    TaskCreate,
    TaskMove,
    TaskResponse,
    TaskUpdate,
)
from ..service import TaskService

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={500: {"model": ErrorResponse}},
)


@router.get("", response_model=GroupedTasksResponse)
async def list_tasks(service: TaskService = Depends(get_task_service)):
    """Get all tasks grouped by category"""
    grouped = await service.list_grouped()
    return GroupedTasksResponse(
        todo=[TaskResponse.from_task(t) for t in grouped["todo"]],
        in_progress=[TaskResponse.from_task(t) for t in grouped["inProgress"]],
        done=[TaskResponse.from_task(t) for t in grouped["done"]],
    )


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_task(task: TaskCreate, service: TaskService = Depends(get_task_service)):
    """Add a new task"""
    created = await service.create(
        title=task.title,
        category=task.category,
        description=task.description,
        due_date=task.due_date,
    )
    return TaskResponse.from_task(created)


@router.put(
    "/update/{task_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    service: TaskService = Depends(get_task_service),
):
    """Edit any subset of title, description, category and due date"""
    return await service.update(
        task_id,
        title=task_update.title,
        description=task_update.description,
        category=task_update.category,
        due_date=task_update.due_date,
    )


@router.put(
    "/{task_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def move_task(
    task_id: str,
    move: TaskMove,
    service: TaskService = Depends(get_task_service),
):
    """Update task category (drag and drop)"""
    return await service.move(task_id, move.category)


@router.delete(
    "/{task_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    """Delete a task"""
    return await service.delete(task_id)
