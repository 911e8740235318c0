from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class Session(BaseModel):
    session_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    queue: list[Any] = Field(default_factory=list)   # Tracks, in playback order
