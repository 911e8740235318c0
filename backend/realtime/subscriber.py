"""
One live WebSocket connection, as seen by the fan-out channel.

Events are queued on an outbox and written by a single pump task, so a
socket sees every event exactly once, in the order it was handed over, and a
slow client never stalls a broadcast.
"""

import asyncio
import json
import logging
from typing import Any

from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState

logger = logging.getLogger(__name__)


class Subscriber:
    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._closed = False

    def __repr__(self) -> str:
        return f"<Subscriber {id(self):#x} ready={self.is_ready}>"

    @property
    def is_ready(self) -> bool:
        """True while the socket is accepted and neither side has closed it."""
        if self._closed:
            return False
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def deliver(self, payload: dict[str, Any]) -> None:
        """Queue a payload for sending. Never blocks, never drops."""
        self._outbox.put_nowait(json.dumps(payload))

    async def pump(self) -> None:
        """Write queued payloads to the socket until close() or cancellation."""
        while not self._closed:
            text = await self._outbox.get()
            if not self.is_ready:
                continue
            try:
                await self.websocket.send_text(text)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                # Best-effort delivery: the receive loop notices the close
                logger.debug("Dropped event for %r: %s", self, exc)
            except Exception:
                logger.exception("Unexpected error sending to %r", self)

    def close(self) -> None:
        self._closed = True

    @property
    def pending(self) -> int:
        return self._outbox.qsize()
