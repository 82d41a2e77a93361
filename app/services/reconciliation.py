"""Reconcile a trainer's weekly template against concrete sessions.

Every available template interval is partitioned into free and booked
sub-intervals by subtracting the active sessions that fall on a matching date.
The output is a derived view: it is rebuilt from scratch on each call and is
never written back to the template.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Protocol

from app.core.metrics import RECONCILIATION_RUNS
from app.db.models import ACTIVE_SESSION_STATUSES
from app.schemas.availability import AvailabilitySlot
from app.services.intervals import day_of_week as weekday_index
from app.services.intervals import overlaps, to_minutes, to_time

logger = logging.getLogger(__name__)


class TemplateSlotLike(Protocol):
    id: int
    day_of_week: int
    start_time: str
    end_time: str
    is_available: bool


class SessionLike(Protocol):
    id: int
    client_name: str
    date: date
    start_time: str
    end_time: str
    status: str


def _slot(template: TemplateSlotLike, kind: str, start: int, end: int, session_id: int | None = None) -> AvailabilitySlot:
    return AvailabilitySlot(
        key=f"{template.id}:{kind}:{start}",
        template_id=template.id,
        day_of_week=template.day_of_week,
        start=to_time(start),
        end=to_time(end),
        is_available=True,
        is_booked=kind == "booked",
        session_id=session_id,
    )


def split_template_interval(template: TemplateSlotLike, sessions: Iterable[SessionLike]) -> list[AvailabilitySlot]:
    slot_start = to_minutes(template.start_time)
    slot_end = to_minutes(template.end_time)

    overlapping = [
        session
        for session in sessions
        if overlaps(slot_start, slot_end, to_minutes(session.start_time), to_minutes(session.end_time))
    ]
    if not overlapping:
        return [_slot(template, "free", slot_start, slot_end)]

    overlapping.sort(key=lambda s: (to_minutes(s.start_time), to_minutes(s.end_time), s.id))

    result: list[AvailabilitySlot] = []
    cursor = slot_start
    for session in overlapping:
        clipped_start = max(slot_start, to_minutes(session.start_time))
        clipped_end = min(slot_end, to_minutes(session.end_time))

        if cursor < clipped_start:
            result.append(_slot(template, "free", cursor, clipped_start))

        # Sessions from different dates on the same weekday may overlap each other;
        # starting at the cursor keeps the booked pieces disjoint.
        booked_start = max(cursor, clipped_start)
        if booked_start < clipped_end:
            result.append(_slot(template, "booked", booked_start, clipped_end, session_id=session.id))

        cursor = max(cursor, clipped_end)

    if cursor < slot_end:
        result.append(_slot(template, "free", cursor, slot_end))

    return result


def blocking_sessions(
    sessions: Iterable[SessionLike],
    day_of_week: int,
    on_date: date | None = None,
    exclude_session_id: int | None = None,
) -> list[SessionLike]:
    return [
        session
        for session in sessions
        if session.status in ACTIVE_SESSION_STATUSES
        and session.id != exclude_session_id
        and weekday_index(session.date) == day_of_week
        and (on_date is None or session.date == on_date)
    ]


def reconcile_day(
    template_slots: Sequence[TemplateSlotLike],
    sessions: Iterable[SessionLike],
    day_of_week: int,
    on_date: date | None = None,
    exclude_session_id: int | None = None,
) -> list[AvailabilitySlot]:
    """Return the reconciled slots of one weekday.

    Without ``on_date`` every matching weekday in ``sessions`` blocks time; with
    it only that calendar date's sessions do. Unavailable template slots are
    appended unchanged after the split available ones.
    """
    day_templates = sorted(
        (slot for slot in template_slots if slot.day_of_week == day_of_week),
        key=lambda slot: (to_minutes(slot.start_time), slot.id),
    )
    day_sessions = blocking_sessions(sessions, day_of_week, on_date=on_date, exclude_session_id=exclude_session_id)

    reconciled: list[AvailabilitySlot] = []
    for template in day_templates:
        if template.is_available:
            reconciled.extend(split_template_interval(template, day_sessions))

    for template in day_templates:
        if not template.is_available:
            reconciled.append(
                AvailabilitySlot(
                    key=f"{template.id}:unavailable:{to_minutes(template.start_time)}",
                    template_id=template.id,
                    day_of_week=day_of_week,
                    start=template.start_time,
                    end=template.end_time,
                    is_available=False,
                    is_booked=False,
                )
            )

    RECONCILIATION_RUNS.inc()
    logger.debug(
        "availability_reconciled day_of_week=%s on_date=%s templates=%s sessions=%s booked=%s",
        day_of_week,
        on_date,
        len(day_templates),
        len(day_sessions),
        sum(1 for slot in reconciled if slot.is_booked),
    )
    return reconciled


def free_slots(reconciled: Iterable[AvailabilitySlot]) -> list[AvailabilitySlot]:
    return [slot for slot in reconciled if slot.is_available and not slot.is_booked]
