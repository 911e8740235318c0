import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, WebSocket

from dependencies import get_channel
from realtime.fanout import FanOutChannel
from realtime.subscriber import Subscriber

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/")
@router.websocket("/ws")
async def queue_updates(websocket: WebSocket, channel: FanOutChannel = Depends(get_channel)):
    """
    Live queue updates.

    The client sends {"type": "subscribe", "sessionId": ...} once; from then
    on it receives {"type": "queue_updated", "queue": [...]} immediately and
    after every accepted song request. Other messages are ignored.
    """
    await websocket.accept()
    subscriber = Subscriber(websocket)
    writer = asyncio.create_task(subscriber.pump())

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is not None:
                channel.handle_message(subscriber, raw)
    finally:
        channel.leave(subscriber)
        subscriber.close()
        writer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await writer
        logger.debug("Realtime connection closed")
