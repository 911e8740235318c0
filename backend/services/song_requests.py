"""
Song requests: validate, append to the session queue, then fan out.

Broadcast delivery is best-effort and is not part of the success contract;
a request succeeds once the track is on the queue, whether zero or fifty
listeners were notified.
"""

import logging
from typing import Any, Optional

from errors import InvalidRequest
from realtime.fanout import FanOutChannel
from store import SessionStore

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False


class SongRequestService:
    def __init__(self, store: SessionStore, channel: FanOutChannel):
        self.store = store
        self.channel = channel

    def request_song(self, session_id: Optional[str], track: Any) -> list[Any]:
        """
        Appends `track` to the session's queue and broadcasts the new queue.

        Raises InvalidRequest if either argument is missing or empty, and
        SessionNotFound (without broadcasting) for unknown sessions.
        Returns the full post-append queue.
        """
        if _is_blank(session_id) or _is_blank(track):
            raise InvalidRequest("Missing sessionId or track")

        queue = self.store.append_track(session_id, track)
        delivered = self.channel.broadcast(session_id, queue)
        logger.info(
            "Queued track #%d on %s, notified %d listener(s)",
            len(queue), session_id, delivered,
        )
        return queue
