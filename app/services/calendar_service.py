import calendar
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import ACTIVE_SESSION_STATUSES, TrainingSession
from app.schemas.calendar import CalendarMode, CalendarShift, CalendarWindowResponse, DayProjection
from app.schemas.session import SessionResponse
from app.services.availability_service import DAY_NAMES, get_template_slots
from app.services.intervals import day_of_week
from app.services.reconciliation import SessionLike, TemplateSlotLike, reconcile_day
from app.services.trainer_service import get_trainer_or_404


def window_bounds(anchor: date, mode: CalendarMode) -> tuple[date, int]:
    """First day and length of the window containing ``anchor``.

    A week starts on the Sunday on or before the anchor; a month covers every
    day of the anchor's month.
    """
    if mode == CalendarMode.WEEK:
        return anchor - timedelta(days=day_of_week(anchor)), 7
    return anchor.replace(day=1), calendar.monthrange(anchor.year, anchor.month)[1]


def shift_anchor(anchor: date, mode: CalendarMode, shift: CalendarShift, today: date) -> date:
    if shift == CalendarShift.TODAY:
        return today
    step = 1 if shift == CalendarShift.NEXT else -1
    if mode == CalendarMode.WEEK:
        return anchor + timedelta(days=7 * step)
    return anchor + relativedelta(months=step)


def project_days(
    template_slots: Sequence[TemplateSlotLike],
    sessions: Sequence[SessionLike],
    start_date: date,
    days: int,
    today: date,
) -> list[DayProjection]:
    projections: list[DayProjection] = []
    for offset in range(days):
        current = start_date + timedelta(days=offset)
        weekday = day_of_week(current)
        slots = reconcile_day(template_slots, sessions, weekday, on_date=current)
        day_sessions = sorted(
            (s for s in sessions if s.date == current and s.status in ACTIVE_SESSION_STATUSES),
            key=lambda s: (s.start_time, s.id),
        )
        projections.append(
            DayProjection(
                date=current,
                day_of_week=weekday,
                day_name=DAY_NAMES[weekday][:3],
                slots=slots,
                sessions=[SessionResponse.model_validate(s) for s in day_sessions],
                is_available=any(slot.is_available for slot in slots),
                is_today=current == today,
                is_past=current < today,
            )
        )
    return projections


def get_calendar_window(
    db: Session,
    trainer_id: int,
    anchor: date,
    mode: CalendarMode,
    today: date,
    shift: CalendarShift | None = None,
) -> CalendarWindowResponse:
    get_trainer_or_404(db, trainer_id)
    if shift is not None:
        anchor = shift_anchor(anchor, mode, shift, today)
    start_date, days = window_bounds(anchor, mode)
    end_date = start_date + timedelta(days=days - 1)

    sessions = db.scalars(
        select(TrainingSession).where(
            TrainingSession.trainer_id == trainer_id,
            TrainingSession.status.in_(ACTIVE_SESSION_STATUSES),
            TrainingSession.date >= start_date,
            TrainingSession.date <= end_date,
        )
    ).all()

    return CalendarWindowResponse(
        anchor=anchor,
        mode=mode,
        start_date=start_date,
        end_date=end_date,
        days=project_days(get_template_slots(db, trainer_id), list(sessions), start_date, days, today),
    )


def _format_ics_local(value: datetime) -> str:
    # Floating time: sessions carry wall-clock times without a zone.
    return value.strftime("%Y%m%dT%H%M%S")


def _escape_ics_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", r"\;")
        .replace(",", r"\,")
        .replace("\r\n", r"\n")
        .replace("\n", r"\n")
    )


def _to_ics_status(status: str) -> str:
    return {
        "pending": "TENTATIVE",
        "cancelled": "CANCELLED",
    }.get(status, "CONFIRMED")


def build_session_calendar_ics(session: TrainingSession, trainer_display_name: str) -> str:
    starts_at = datetime.combine(session.date, datetime.strptime(session.start_time, "%H:%M").time())
    ends_at = datetime.combine(session.date, datetime.strptime(session.end_time, "%H:%M").time())
    summary = _escape_ics_text(f"{session.category} with {trainer_display_name}")
    description = _escape_ics_text(
        f"Session #{session.id}\nTrainer: {trainer_display_name}\nClient: {session.client_name}"
    )

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Coaching Schedule API//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:session-{session.id}@coaching-schedule.local",
        f"DTSTAMP:{datetime.now(UTC).strftime('%Y%m%dT%H%M%SZ')}",
        f"DTSTART:{_format_ics_local(starts_at)}",
        f"DTEND:{_format_ics_local(ends_at)}",
        f"SUMMARY:{summary}",
        f"DESCRIPTION:{description}",
        f"LOCATION:{_escape_ics_text(session.location)}",
        f"STATUS:{_to_ics_status(session.status)}",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
    return "\r\n".join(lines)
