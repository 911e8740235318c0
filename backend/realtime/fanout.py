"""
Real-time fan-out of queue state.

Pushes `queue_updated` events carrying the full queue to every ready
subscriber of a session, and syncs new subscribers with the current queue
the moment they join.

Every method here is synchronous: registering, snapshotting and handing
events to subscriber outboxes happen without yielding to the event loop, so
a subscriber registered before an append always sees that append's
broadcast, and its join sync always precedes it.
"""

import json
import logging
from typing import Any, Optional, Protocol, Union

from pydantic import ValidationError

from errors import SessionNotFound
from models.messages import QueueUpdatedMessage, SubscribeMessage
from realtime.registry import SubscriptionRegistry
from store import SessionStore

logger = logging.getLogger(__name__)


class Handle(Protocol):
    """What the channel needs from a connection."""

    @property
    def is_ready(self) -> bool: ...

    def deliver(self, payload: dict[str, Any]) -> None: ...


def _queue_updated(queue: list[Any]) -> dict[str, Any]:
    return QueueUpdatedMessage(queue=queue).model_dump()


def parse_subscribe(raw: Union[str, bytes]) -> Optional[SubscribeMessage]:
    """Returns the subscribe message in `raw`, or None for anything else."""
    try:
        data = json.loads(raw)
    except (ValueError, TypeError):
        return None
    if not isinstance(data, dict) or data.get("type") != "subscribe":
        return None
    try:
        return SubscribeMessage.model_validate(data)
    except ValidationError:
        return None


class FanOutChannel:
    def __init__(self, store: SessionStore, registry: SubscriptionRegistry):
        self.store = store
        self.registry = registry

    def join(self, session_id: str, handle: Handle) -> bool:
        """
        Subscribe `handle` to `session_id` and send it the current queue.

        A handle stays bound to its first session. Re-subscribing to that
        session re-sends the sync; a subscribe naming another session is
        ignored. Returns False when the request was ignored.
        """
        bound = self.registry.session_of(handle)
        if bound is not None and bound != session_id:
            logger.debug("Ignoring subscribe to %s from handle bound to %s", session_id, bound)
            return False

        self.registry.subscribe(session_id, handle)

        # Unknown sessions get no sync; the handle just waits
        if self.store.exists(session_id) and handle.is_ready:
            handle.deliver(_queue_updated(self.store.get_queue(session_id)))
        return True

    def leave(self, handle: Handle) -> None:
        self.registry.unsubscribe(handle)

    def broadcast(self, session_id: str, queue: list[Any]) -> int:
        """
        Hand `queue` to every ready subscriber of `session_id`.
        Handles that are not ready are skipped silently. Returns how many
        handles the event was handed to. Raises SessionNotFound for unknown
        sessions, so handles waiting on an id nobody created get nothing.
        """
        if not self.store.exists(session_id):
            raise SessionNotFound(session_id)

        payload = _queue_updated(queue)
        delivered = 0
        for handle in self.registry.subscribers_of(session_id):
            if not handle.is_ready:
                continue
            handle.deliver(payload)
            delivered += 1

        logger.debug("Broadcast queue of %d to %d subscriber(s) of %s", len(queue), delivered, session_id)
        return delivered

    def handle_message(self, handle: Handle, raw: Union[str, bytes]) -> None:
        """Apply one inbound frame. Anything but a valid subscribe is ignored."""
        message = parse_subscribe(raw)
        if message is None:
            logger.debug("Ignoring unrecognized message from %r", handle)
            return
        self.join(message.session_id, handle)
