from fastapi import Request, WebSocket

from .broadcaster import ConnectionRegistry
from .service import TaskService


def get_task_service(request: Request) -> TaskService:
    """Service wired once at startup and kept on app.state"""
    return request.app.state.task_service


def get_connections(websocket: WebSocket) -> ConnectionRegistry:
    return websocket.app.state.connections
