from datetime import date
from enum import Enum

from pydantic import BaseModel

from app.schemas.availability import AvailabilitySlot
from app.schemas.session import SessionResponse


class CalendarMode(str, Enum):
    WEEK = "week"
    MONTH = "month"


class CalendarShift(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    TODAY = "today"


class DayProjection(BaseModel):
    date: date
    day_of_week: int
    day_name: str
    slots: list[AvailabilitySlot]
    sessions: list[SessionResponse]
    is_available: bool
    is_today: bool
    is_past: bool


class CalendarWindowResponse(BaseModel):
    anchor: date
    mode: CalendarMode
    start_date: date
    end_date: date
    days: list[DayProjection]
