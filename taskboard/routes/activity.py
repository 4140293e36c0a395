from typing import List

from fastapi import APIRouter, Depends

from ..dependencies import get_task_service
from ..schemas import ActivityLogResponse, ErrorResponse
from ..service import TaskService

router = APIRouter(tags=["activity"], responses={500: {"model": ErrorResponse}})


@router.get("/activity-log", response_model=List[ActivityLogResponse])
async def list_activity_log(service: TaskService = Depends(get_task_service)):
    """Get the activity log, newest first"""
    entries = await service.list_activity_log()
    return [ActivityLogResponse.from_entry(entry) for entry in entries]
