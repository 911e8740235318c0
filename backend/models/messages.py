"""
Real-time wire messages.

Inbound:  {"type": "subscribe", "sessionId": "..."}
Outbound: {"type": "queue_updated", "queue": [...]}
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class SubscribeMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["subscribe"]
    session_id: str = Field(alias="sessionId", min_length=1)


class QueueUpdatedMessage(BaseModel):
    type: Literal["queue_updated"] = "queue_updated"
    queue: list[Any]
