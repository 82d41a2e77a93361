from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from app.db.models import SessionStatus, SessionType
from app.schemas.common import WallClockTime
from app.services.intervals import check_interval


class SessionView(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"
    CANCELLED = "cancelled"


class SessionCreateRequest(BaseModel):
    client_id: int
    client_name: str = Field(min_length=1, max_length=120)
    session_type: SessionType = SessionType.PERSONAL
    category: str = Field(default="Training", min_length=1, max_length=60)
    date: date
    start_time: WallClockTime
    end_time: WallClockTime
    status: SessionStatus = SessionStatus.CONFIRMED
    location: str = Field(default="TBD", max_length=120)
    notes: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def validate_session(self) -> "SessionCreateRequest":
        check_interval(self.start_time, self.end_time)
        if self.status not in (SessionStatus.PENDING, SessionStatus.CONFIRMED):
            raise ValueError("new sessions must be pending or confirmed")
        return self


class SessionRescheduleRequest(BaseModel):
    date: date
    start_time: WallClockTime
    end_time: WallClockTime

    @model_validator(mode="after")
    def validate_interval(self) -> "SessionRescheduleRequest":
        check_interval(self.start_time, self.end_time)
        return self


class SessionResponse(BaseModel):
    id: int
    trainer_id: int
    client_id: int
    client_name: str
    session_type: str
    category: str
    date: date
    start_time: str
    end_time: str
    status: str
    location: str
    notes: str | None
    request_id: int | None
    created_at: datetime
    cancelled_at: datetime | None

    model_config = {"from_attributes": True}
