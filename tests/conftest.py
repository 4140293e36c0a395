import pytest
import pytest_asyncio

from taskboard.broadcaster import ConnectionRegistry, NotificationBroadcaster
from taskboard.service import TaskService

from fakes import FakeConnection, InMemoryActivityLogRepository, InMemoryTaskRepository


@pytest.fixture()
def task_repo() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture()
def log_repo() -> InMemoryActivityLogRepository:
    return InMemoryActivityLogRepository()


@pytest.fixture()
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest_asyncio.fixture()
async def listener(registry: ConnectionRegistry) -> FakeConnection:
    """A real-time client that is already connected"""
    connection = FakeConnection()
    await registry.add(connection)
    return connection


@pytest.fixture()
def service(task_repo, log_repo, registry) -> TaskService:
    """TaskService wired to in-memory fakes"""
    return TaskService(task_repo, log_repo, NotificationBroadcaster(registry))
