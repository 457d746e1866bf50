import asyncio
import contextlib
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from loguru import logger

from app.dependencies import get_ws_client_manager
from vidsentry.client_manager import ClientManager

router = APIRouter(tags=["live-updates"])


@router.websocket("/ws/analysis-status")
async def analysis_status_channel(
    websocket: WebSocket,
    manager: ClientManager = Depends(get_ws_client_manager),
):
    """Relays every broadcast progress event to this client until it disconnects."""
    broadcaster = manager.broadcaster
    # Subscribe before the handshake completes so no event published after accept is missed
    subscription = broadcaster.subscribe()

    async def relay():
        try:
            async for event_name, payload in subscription:
                await websocket.send_json({"event": event_name, "data": payload})
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug(f"Stopped relaying to client: {e}")

    relay_task = None
    try:
        await websocket.accept()
        logger.info("Client connected")
        relay_task = asyncio.create_task(relay())
        while True:
            # Inbound frames are ignored; receiving is how a disconnect is observed
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        broadcaster.unsubscribe(subscription)
        if relay_task is not None:
            relay_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await relay_task
