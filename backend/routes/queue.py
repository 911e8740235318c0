from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from dependencies import get_song_requests, get_store
from errors import InvalidRequest
from services.song_requests import SongRequestService
from store import SessionStore

router = APIRouter(tags=["queue"])


# ---------- Request / Response schemas ----------

class RequestSongRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    track: Any = None       # Opaque track record, stored verbatim


class RequestSongResponse(BaseModel):
    success: bool = True


# ---------- Endpoints ----------

@router.post("/api/request_song", response_model=RequestSongResponse)
async def request_song(
    body: Optional[RequestSongRequest] = Body(default=None),
    song_requests: SongRequestService = Depends(get_song_requests),
):
    """
    Appends a track to the session queue and pushes the new queue
    to everyone subscribed to the session.
    """
    if body is None:
        raise InvalidRequest("Missing sessionId or track")

    song_requests.request_song(body.session_id, body.track)
    return RequestSongResponse()


@router.get("/api/queue")
async def get_queue(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    store: SessionStore = Depends(get_store),
) -> list[Any]:
    """Returns the session's queue in playback order."""
    if not session_id:
        raise InvalidRequest("Missing sessionId")
    return store.get_queue(session_id)
