from enum import Enum

from pydantic import BaseModel


class NotificationKind(str, Enum):
    APPROVED = "approved"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class NotificationEvent(BaseModel):
    client_id: int
    trainer_id: int
    kind: NotificationKind
    message: str
    session_id: int | None = None
