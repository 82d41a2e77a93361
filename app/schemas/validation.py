from datetime import date

from pydantic import BaseModel, Field, computed_field

from app.schemas.common import WallClockTime


class ValidationRequest(BaseModel):
    date: date
    start: WallClockTime
    end: WallClockTime
    exclude_session_id: int | None = None


class ValidationVerdict(BaseModel):
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not self.errors
