"""
Session id -> live subscriber handles.

The registry only tracks membership. Connection lifecycles belong to the
WebSocket route, which calls unsubscribe() when a socket goes away.
"""

import logging
from collections.abc import Hashable
from typing import Optional

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Tracks which handles listen to which session. Empty sessions have no entry."""

    def __init__(self) -> None:
        self._subscribers: dict[str, set[Hashable]] = {}
        self._bindings: dict[Hashable, str] = {}

    def subscribe(self, session_id: str, handle: Hashable) -> None:
        """
        Adds `handle` to `session_id`'s set and binds it to that session.
        Idempotent. The session does not have to exist yet.
        """
        bound = self._bindings.get(handle)
        if bound is not None and bound != session_id:
            raise ValueError(f"handle already bound to session {bound!r}")

        self._subscribers.setdefault(session_id, set()).add(handle)
        self._bindings[handle] = session_id
        logger.debug("Subscribed handle to %s (%d listening)", session_id, len(self._subscribers[session_id]))

    def unsubscribe(self, handle: Hashable) -> None:
        session_id = self._bindings.pop(handle, None)
        if session_id is None:
            return

        handles = self._subscribers.get(session_id)
        if handles is None:
            return
        handles.discard(handle)
        if not handles:
            del self._subscribers[session_id]
        logger.debug("Unsubscribed handle from %s", session_id)

    def subscribers_of(self, session_id: str) -> frozenset:
        return frozenset(self._subscribers.get(session_id, ()))

    def session_of(self, handle: Hashable) -> Optional[str]:
        return self._bindings.get(handle)

    def has_session(self, session_id: str) -> bool:
        return session_id in self._subscribers

    def session_count(self) -> int:
        return len(self._subscribers)

    def subscriber_count(self) -> int:
        return len(self._bindings)
