import asyncio
import contextlib
from typing import Optional

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect

from ..auth.security import actor_from_token
from ..logging import structlog
from ..services.change_hub import hub

router = APIRouter(tags=["changes"])
logger = structlog.get_logger(__name__)


async def _forward(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        event = await queue.get()
        await websocket.send_json(event)


async def _stop_sender(sender: asyncio.Task, actor_id: str) -> Optional[BaseException]:
    """Cancel the forwarding task and return the error it died of, if any."""
    sender.cancel()
    try:
        with contextlib.suppress(asyncio.CancelledError):
            await sender
    except Exception as e:
        logger.warning("change_feed_send_failed", actor_id=actor_id, error=str(e))
        return e
    return None


@router.websocket("/ws/changes")
async def ws_changes(websocket: WebSocket, token: Optional[str] = None):
    if not token:
        await websocket.close(code=4401)
        return
    try:
        actor_id = actor_from_token(token)
    except HTTPException:
        await websocket.close(code=4401)
        return

    await websocket.accept()
    queue = await hub.connect(websocket)
    sender = asyncio.create_task(_forward(websocket, queue))
    logger.info("change_feed_connected", actor_id=actor_id)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(websocket)
        await _stop_sender(sender, actor_id)
        logger.info("change_feed_disconnected", actor_id=actor_id)
