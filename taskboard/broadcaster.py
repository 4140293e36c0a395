import asyncio
import json
import logging
from typing import Awaitable, List, Protocol, Set

logger = logging.getLogger(__name__)

TASKS_CHANGED_EVENT = "task-updated"
SEND_TIMEOUT_SECONDS = 5.0


class Connection(Protocol):
    """Anything that can push text to a client, e.g. a FastAPI WebSocket"""

    def send_text(self, data: str) -> Awaitable[None]: ...


class ConnectionRegistry:
    """Set of live real-time connections, safe to share between coroutines"""

    def __init__(self):
        self._connections: Set[Connection] = set()
        self._lock = asyncio.Lock()

    async def add(self, connection: Connection) -> None:
        async with self._lock:
            self._connections.add(connection)
        logger.info("Real-time client connected (%d live)", len(self._connections))

    async def remove(self, connection: Connection) -> None:
        async with self._lock:
            self._connections.discard(connection)
        logger.info("Real-time client disconnected (%d live)", len(self._connections))

    async def snapshot(self) -> List[Connection]:
        async with self._lock:
            return list(self._connections)

    def __len__(self) -> int:
        return len(self._connections)


class NotificationBroadcaster:
    def __init__(self, registry: ConnectionRegistry, send_timeout: float = SEND_TIMEOUT_SECONDS):
        self.registry = registry
        self.send_timeout = send_timeout

    async def notify_tasks_changed(self) -> None:
        """Tell every connected client to re-fetch the board; no payload"""
        message = json.dumps({"type": TASKS_CHANGED_EVENT})
        connections = await self.registry.snapshot()

        # Sends run together, so a stalled client costs at most one timeout.
        results = await asyncio.gather(
            *(asyncio.wait_for(c.send_text(message), self.send_timeout) for c in connections),
            return_exceptions=True,
        )

        # Remove disconnected or stalled connections
        for connection, result in zip(connections, results):
            if isinstance(result, Exception):
                logger.debug("Dropping connection after failed send: %r", result)
                await self.registry.remove(connection)
