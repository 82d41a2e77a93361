"""Wall-clock time helpers shared by the availability and conflict services.

Times are ``HH:MM`` strings in a single implicit zone. Intervals are half-open,
so a session ending at 10:00 and one starting at 10:00 do not overlap.
"""

import re
from datetime import date

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"([01]\d|2[0-3]):([0-5]\d)")


class TimeFormatError(ValueError):
    pass


def to_minutes(value: str) -> int:
    if not isinstance(value, str):
        raise TimeFormatError(f"Time must be a HH:MM string, got {value!r}")
    match = _TIME_RE.fullmatch(value)
    if not match:
        raise TimeFormatError(f"Invalid time {value!r}, expected HH:MM between 00:00 and 23:59")
    return int(match.group(1)) * 60 + int(match.group(2))


def to_time(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise TimeFormatError(f"Minute offset {minutes} is outside a single day")
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def _as_minutes(value: int | str) -> int:
    return value if isinstance(value, int) else to_minutes(value)


def overlaps(start_a: int | str, end_a: int | str, start_b: int | str, end_b: int | str) -> bool:
    return _as_minutes(start_a) < _as_minutes(end_b) and _as_minutes(start_b) < _as_minutes(end_a)


def contains(outer_start: int, outer_end: int, inner_start: int, inner_end: int) -> bool:
    return outer_start <= inner_start and inner_end <= outer_end


def check_interval(start: str, end: str) -> tuple[int, int]:
    """Parse an interval and require ``start < end``.

    Intervals that cross midnight are not representable and are rejected.
    """
    start_minutes = to_minutes(start)
    end_minutes = to_minutes(end)
    if end_minutes <= start_minutes:
        raise ValueError("end time must be after start time")
    return start_minutes, end_minutes


def day_of_week(value: date) -> int:
    """Day index with Sunday as 0."""
    return (value.weekday() + 1) % 7
