import asyncio
import json
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..broadcaster import ConnectionRegistry
from ..dependencies import get_connections

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

KEEPALIVE_SECONDS = 30.0


@router.websocket("/ws")
async def websocket_tasks_endpoint(
    websocket: WebSocket,
    connections: ConnectionRegistry = Depends(get_connections),
):
    """WebSocket endpoint for real-time task change notifications"""
    await websocket.accept()
    await connections.add(websocket)

    try:
        # Keep connection alive
        while True:
            try:
                message = await asyncio.wait_for(websocket.receive(), timeout=KEEPALIVE_SECONDS)
            except asyncio.TimeoutError:
                await websocket.send_text(json.dumps({"type": "ping"}))
                continue

            if message["type"] == "websocket.disconnect":
                break
            # Binary frames are ignored
            if message.get("text") == "ping":
                await websocket.send_text("pong")
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug("WebSocket closed: %r", e)
    finally:
        await connections.remove(websocket)
