from typing import Annotated

from pydantic import AfterValidator

from app.services.intervals import to_minutes


def _check_wall_clock(value: str) -> str:
    to_minutes(value)
    return value


WallClockTime = Annotated[str, AfterValidator(_check_wall_clock)]
