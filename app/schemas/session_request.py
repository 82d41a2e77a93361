from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from app.db.models import SessionType
from app.schemas.common import WallClockTime
from app.services.intervals import check_interval


class SessionRequestCreate(BaseModel):
    client_id: int
    client_name: str = Field(min_length=1, max_length=120)
    session_type: SessionType = SessionType.PERSONAL
    category: str = Field(default="Training", min_length=1, max_length=60)
    requested_date: date
    requested_start: WallClockTime
    requested_end: WallClockTime
    message: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def validate_interval(self) -> "SessionRequestCreate":
        check_interval(self.requested_start, self.requested_end)
        return self


class SessionRequestResponse(BaseModel):
    id: int
    trainer_id: int
    client_id: int
    client_name: str
    session_type: str
    category: str
    requested_date: date
    requested_start: str
    requested_end: str
    status: str
    message: str | None
    created_at: datetime
    resolved_at: datetime | None

    model_config = {"from_attributes": True}
