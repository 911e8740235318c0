from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from dependencies import get_store
from store import SessionStore

router = APIRouter(tags=["session"])


# ---------- Response schemas ----------

class CreateSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")


# ---------- Endpoints ----------

@router.post("/api/create_session", response_model=CreateSessionResponse)
async def create_session(store: SessionStore = Depends(get_store)):
    """
    Creates a new listening session with an empty queue.
    Returns the sessionId that participants use to subscribe and request songs.
    """
    session_id = store.create_session()
    return CreateSessionResponse(session_id=session_id)
