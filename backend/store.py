"""
In-memory session store.

Sessions live in a plain dict owned by one SessionStore instance, built at
startup and handed to the routes through app.state. Nothing survives a
restart.
"""

import logging
import uuid
from typing import Any

from errors import SessionNotFound
from models.session import Session

logger = logging.getLogger(__name__)

SESSION_ID_LENGTH = 12


def _new_session_id() -> str:
    return uuid.uuid4().hex[:SESSION_ID_LENGTH]


class SessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create_session(self) -> str:
        """
        Creates an empty session and returns its id.
        Regenerates on the (unlikely) chance the id is already taken, so an
        existing queue is never overwritten.
        """
        session_id = _new_session_id()
        while session_id in self._sessions:
            logger.warning("Session id collision on %s, regenerating", session_id)
            session_id = _new_session_id()

        self._sessions[session_id] = Session(session_id=session_id)
        logger.info("Created session %s", session_id)
        return session_id

    def _get(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def get_queue(self, session_id: str) -> list[Any]:
        return list(self._get(session_id).queue)

    def append_track(self, session_id: str, track: Any) -> list[Any]:
        """Appends to the end of the queue and returns the full resulting queue."""
        session = self._get(session_id)
        session.queue.append(track)
        return list(session.queue)
