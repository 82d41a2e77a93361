from pydantic import BaseModel, Field, model_validator

from app.schemas.common import WallClockTime
from app.services.intervals import check_interval


class TimeInterval(BaseModel):
    start: WallClockTime
    end: WallClockTime

    @model_validator(mode="after")
    def validate_interval(self) -> "TimeInterval":
        check_interval(self.start, self.end)
        return self


class TimeSlotUpsertRequest(TimeInterval):
    replace_index: int | None = Field(default=None, ge=0)


class TemplateSlotResponse(BaseModel):
    id: int
    trainer_id: int
    day_of_week: int
    start_time: str
    end_time: str
    is_available: bool

    model_config = {"from_attributes": True}


class AvailabilitySlot(BaseModel):
    """A reconciled piece of a template interval. Never persisted."""

    key: str
    template_id: int
    day_of_week: int
    start: str
    end: str
    is_available: bool
    is_booked: bool = False
    session_id: int | None = None


class WeeklyAvailabilityDay(BaseModel):
    day: str
    day_of_week: int
    is_available: bool
    time_slots: list[TimeInterval]
