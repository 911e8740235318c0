from models.messages import QueueUpdatedMessage, SubscribeMessage
from models.session import Session

__all__ = ["QueueUpdatedMessage", "SubscribeMessage", "Session"]
