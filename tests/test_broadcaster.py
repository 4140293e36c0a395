import asyncio
import json

import pytest

from taskboard.broadcaster import ConnectionRegistry, NotificationBroadcaster

from fakes import FakeConnection


@pytest.mark.asyncio
async def test_notify_reaches_every_connection():
    registry = ConnectionRegistry()
    clients = [FakeConnection() for _ in range(3)]
    for client in clients:
        await registry.add(client)

    await NotificationBroadcaster(registry).notify_tasks_changed()

    for client in clients:
        assert [json.loads(m) for m in client.sent] == [{"type": "task-updated"}]


@pytest.mark.asyncio
async def test_notify_without_connections_is_a_no_op():
    registry = ConnectionRegistry()
    await NotificationBroadcaster(registry).notify_tasks_changed()
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_failed_connection_is_dropped_and_others_still_notified():
    registry = ConnectionRegistry()
    healthy, dead = FakeConnection(), FakeConnection(fail=True)
    await registry.add(healthy)
    await registry.add(dead)

    await NotificationBroadcaster(registry).notify_tasks_changed()

    assert len(healthy.sent) == 1
    assert await registry.snapshot() == [healthy]


@pytest.mark.asyncio
async def test_removed_connection_gets_nothing():
    registry = ConnectionRegistry()
    client = FakeConnection()
    await registry.add(client)
    await registry.remove(client)
    await registry.remove(client)

    await NotificationBroadcaster(registry).notify_tasks_changed()

    assert client.sent == []


@pytest.mark.asyncio
async def test_concurrent_joins_and_broadcasts():
    registry = ConnectionRegistry()
    broadcaster = NotificationBroadcaster(registry)
    clients = [FakeConnection() for _ in range(20)]

    await asyncio.gather(
        *(registry.add(c) for c in clients),
        *(broadcaster.notify_tasks_changed() for _ in range(5)),
    )

    assert len(registry) == 20
    await broadcaster.notify_tasks_changed()
    assert all(len(c.sent) >= 1 for c in clients)


@pytest.mark.asyncio
async def test_stalled_connection_times_out_without_blocking_others():
    registry = ConnectionRegistry()
    healthy, stalled = FakeConnection(), FakeConnection(delay=10)
    await registry.add(healthy)
    await registry.add(stalled)
    broadcaster = NotificationBroadcaster(registry, send_timeout=0.05)

    await asyncio.wait_for(broadcaster.notify_tasks_changed(), timeout=2)

    assert len(healthy.sent) == 1
    assert stalled.sent == []
    assert await registry.snapshot() == [healthy]
