import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.metrics import VALIDATION_VERDICTS
from app.db.models import ACTIVE_SESSION_STATUSES
from app.schemas.validation import ValidationVerdict
from app.services.availability_service import get_active_sessions, get_template_slots
from app.services.intervals import TimeFormatError, contains, day_of_week, overlaps, to_minutes
from app.services.reconciliation import SessionLike, TemplateSlotLike, free_slots, reconcile_day

logger = logging.getLogger(__name__)

NO_AVAILABILITY_THIS_DAY = "Trainer is not available on this day of the week"
OUTSIDE_HOURS_OR_BOOKED = "Requested time is outside available hours or already booked"
IN_THE_PAST = "Cannot schedule sessions in the past"
END_BEFORE_START = "End time must be after start time"


def find_session_conflict(
    sessions: Iterable[SessionLike],
    session_date: date,
    start_minutes: int,
    end_minutes: int,
    exclude_session_id: int | None = None,
) -> SessionLike | None:
    candidates = sorted(
        (
            session
            for session in sessions
            if session.status in ACTIVE_SESSION_STATUSES
            and session.id != exclude_session_id
            and session.date == session_date
            and overlaps(start_minutes, end_minutes, session.start_time, session.end_time)
        ),
        key=lambda s: (to_minutes(s.start_time), s.id),
    )
    return candidates[0] if candidates else None


def check_availability(
    template_slots: Sequence[TemplateSlotLike],
    sessions: Iterable[SessionLike],
    session_date: date,
    start_minutes: int,
    end_minutes: int,
    exclude_session_id: int | None = None,
) -> str | None:
    """Return the reason the window is not bookable, or ``None`` when it is."""
    weekday = day_of_week(session_date)
    reconciled = reconcile_day(
        template_slots,
        sessions,
        weekday,
        on_date=session_date,
        exclude_session_id=exclude_session_id,
    )
    if not any(slot.is_available for slot in reconciled):
        return NO_AVAILABILITY_THIS_DAY

    for slot in free_slots(reconciled):
        if contains(to_minutes(slot.start), to_minutes(slot.end), start_minutes, end_minutes):
            return None
    return OUTSIDE_HOURS_OR_BOOKED


def validate_session_slot(
    session_date: date,
    start_time: str,
    end_time: str,
    *,
    template_slots: Sequence[TemplateSlotLike],
    sessions: Sequence[SessionLike],
    now: datetime,
    exclude_session_id: int | None = None,
) -> ValidationVerdict:
    verdict = ValidationVerdict()

    try:
        start_minutes = to_minutes(start_time)
        end_minutes = to_minutes(end_time)
    except TimeFormatError as exc:
        verdict.errors.append(str(exc))
        return verdict
    if end_minutes <= start_minutes:
        verdict.errors.append(END_BEFORE_START)
        return verdict

    conflict = find_session_conflict(sessions, session_date, start_minutes, end_minutes, exclude_session_id)
    if conflict is not None:
        verdict.errors.append(
            f"Conflicts with existing session: {conflict.client_name} "
            f"at {conflict.start_time}-{conflict.end_time}"
        )

    reason = check_availability(
        template_slots, sessions, session_date, start_minutes, end_minutes, exclude_session_id
    )
    if reason is not None:
        verdict.errors.append(reason)

    starts_at = datetime.combine(session_date, time(*divmod(start_minutes, 60)))
    if starts_at <= now:
        verdict.errors.append(IN_THE_PAST)

    if starts_at > now + relativedelta(months=settings.max_advance_months):
        verdict.warnings.append(f"Session is more than {settings.max_advance_months} months in advance")

    hour = start_minutes // 60
    if hour < settings.business_hours_start or hour > settings.business_hours_end:
        verdict.warnings.append(
            "Session is outside normal business hours "
            f"({settings.business_hours_start:02d}:00-{settings.business_hours_end:02d}:00)"
        )

    return verdict


def validate_request(
    db: Session,
    trainer_id: int,
    session_date: date,
    start_time: str,
    end_time: str,
    now: datetime,
    exclude_session_id: int | None = None,
) -> ValidationVerdict:
    verdict = validate_session_slot(
        session_date,
        start_time,
        end_time,
        template_slots=get_template_slots(db, trainer_id),
        sessions=get_active_sessions(db, trainer_id, on_date=session_date),
        now=now,
        exclude_session_id=exclude_session_id,
    )
    VALIDATION_VERDICTS.labels(outcome="valid" if verdict.is_valid else "rejected").inc()
    if not verdict.is_valid:
        logger.info(
            "slot_rejected trainer_id=%s date=%s start=%s end=%s errors=%s",
            trainer_id,
            session_date,
            start_time,
            end_time,
            len(verdict.errors),
        )
    return verdict
