import logging
from collections.abc import Iterable
from datetime import date, datetime

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.locks import schedule_locks
from app.core.metrics import SCHEDULE_TRANSITIONS
from app.db.models import (
    ACTIVE_SESSION_STATUSES,
    SessionRequest,
    SessionRequestStatus,
    SessionStatus,
    TrainingSession,
)
from app.schemas.notification import NotificationEvent, NotificationKind
from app.schemas.session import SessionCreateRequest, SessionView
from app.schemas.session_request import SessionRequestCreate
from app.schemas.validation import ValidationVerdict
from app.services.availability_service import get_reconciled_availability
from app.services.conflict_service import validate_request
from app.services.intervals import day_of_week, to_minutes
from app.services.notification_service import NotificationSink
from app.services.trainer_service import get_trainer_or_404

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND_DETAIL = "Session not found"
REQUEST_NOT_FOUND_DETAIL = "Session request not found"
REQUEST_ALREADY_RESOLVED_DETAIL = "Session request already resolved"
SESSION_NOT_ACTIVE_DETAIL = "Only pending or confirmed sessions can be rescheduled"
COMPLETED_SESSION_CANCEL_DETAIL = "Completed session cannot be cancelled"


def _format_slot(session_date: date, start_time: str) -> str:
    return f"{session_date.strftime('%a, %b %d')} at {start_time}"


def _log_reconciled_days(db: Session, trainer_id: int, dates: Iterable[date]) -> None:
    """Rebuild the reconciled view of each affected date and log its free and booked counts.

    Nothing is stored; every availability read rebuilds the view itself.
    """
    for affected in sorted(set(dates)):
        slots = get_reconciled_availability(db, trainer_id, day_of_week(affected), on_date=affected)
        logger.info(
            "availability_resynced trainer_id=%s date=%s free=%s booked=%s",
            trainer_id,
            affected,
            sum(1 for slot in slots if slot.is_available and not slot.is_booked),
            sum(1 for slot in slots if slot.is_booked),
        )


def _notify(
    notifier: NotificationSink,
    trainer_id: int,
    client_id: int,
    kind: NotificationKind,
    message: str,
    session_id: int | None = None,
) -> None:
    SCHEDULE_TRANSITIONS.labels(kind=kind.value).inc()
    notifier.publish(
        NotificationEvent(
            client_id=client_id,
            trainer_id=trainer_id,
            kind=kind,
            message=message,
            session_id=session_id,
        )
    )


def get_session_or_404(db: Session, trainer_id: int, session_id: int) -> TrainingSession:
    session = db.scalar(
        select(TrainingSession).where(
            TrainingSession.id == session_id,
            TrainingSession.trainer_id == trainer_id,
        )
    )
    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SESSION_NOT_FOUND_DETAIL)
    return session


def get_request_or_404(db: Session, trainer_id: int, request_id: int) -> SessionRequest:
    request = db.scalar(
        select(SessionRequest).where(
            SessionRequest.id == request_id,
            SessionRequest.trainer_id == trainer_id,
        )
    )
    if not request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REQUEST_NOT_FOUND_DETAIL)
    return request


def list_sessions(
    db: Session,
    trainer_id: int,
    today: date,
    view: SessionView | None = None,
    session_type: str | None = None,
    status_filter: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[TrainingSession]:
    get_trainer_or_404(db, trainer_id)
    query = select(TrainingSession).where(TrainingSession.trainer_id == trainer_id)
    order = (TrainingSession.date, TrainingSession.start_time, TrainingSession.id)

    if view == SessionView.UPCOMING:
        query = query.where(
            TrainingSession.status.in_(ACTIVE_SESSION_STATUSES),
            TrainingSession.date >= today,
        )
    elif view == SessionView.PAST:
        query = query.where(
            or_(
                TrainingSession.status == SessionStatus.COMPLETED.value,
                (TrainingSession.status.in_(ACTIVE_SESSION_STATUSES)) & (TrainingSession.date < today),
            )
        )
        order = (TrainingSession.date.desc(), TrainingSession.start_time.desc(), TrainingSession.id.desc())
    elif view == SessionView.CANCELLED:
        query = query.where(TrainingSession.status == SessionStatus.CANCELLED.value)
        order = (TrainingSession.date.desc(), TrainingSession.start_time.desc(), TrainingSession.id.desc())

    if session_type:
        query = query.where(TrainingSession.session_type == session_type)
    if status_filter:
        query = query.where(TrainingSession.status == status_filter)
    if date_from:
        query = query.where(TrainingSession.date >= date_from)
    if date_to:
        query = query.where(TrainingSession.date <= date_to)

    return list(db.scalars(query.order_by(*order).limit(limit).offset(offset)).all())


def list_requests(
    db: Session,
    trainer_id: int,
    status_filter: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[SessionRequest]:
    get_trainer_or_404(db, trainer_id)
    query = select(SessionRequest).where(SessionRequest.trainer_id == trainer_id)
    if status_filter:
        query = query.where(SessionRequest.status == status_filter)
    query = query.order_by(SessionRequest.created_at, SessionRequest.id).limit(limit).offset(offset)
    return list(db.scalars(query).all())


def create_request(db: Session, trainer_id: int, payload: SessionRequestCreate) -> SessionRequest:
    get_trainer_or_404(db, trainer_id)
    request = SessionRequest(
        trainer_id=trainer_id,
        client_id=payload.client_id,
        client_name=payload.client_name,
        session_type=payload.session_type.value,
        category=payload.category,
        requested_date=payload.requested_date,
        requested_start=payload.requested_start,
        requested_end=payload.requested_end,
        message=payload.message,
        status=SessionRequestStatus.PENDING.value,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(
        "session_requested trainer_id=%s request_id=%s client_id=%s date=%s",
        trainer_id,
        request.id,
        request.client_id,
        request.requested_date,
    )
    return request


def approve_request(
    db: Session,
    trainer_id: int,
    request_id: int,
    now: datetime,
    notifier: NotificationSink,
) -> TrainingSession | ValidationVerdict:
    """Turn a pending request into a confirmed session.

    The slot is validated and the session written while the trainer's schedule
    is locked. A failing verdict is returned as-is and the request stays pending.
    """
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        request = get_request_or_404(db, trainer_id, request_id)
        if not request.is_pending:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=REQUEST_ALREADY_RESOLVED_DETAIL)

        verdict = validate_request(
            db,
            trainer_id,
            request.requested_date,
            request.requested_start,
            request.requested_end,
            now=now,
        )
        if not verdict.is_valid:
            db.rollback()
            return verdict

        session = TrainingSession(
            trainer_id=trainer_id,
            client_id=request.client_id,
            client_name=request.client_name,
            session_type=request.session_type,
            category=request.category,
            date=request.requested_date,
            start_time=request.requested_start,
            end_time=request.requested_end,
            status=SessionStatus.CONFIRMED.value,
            notes=request.message,
            request_id=request.id,
        )
        db.add(session)
        request.resolve(SessionRequestStatus.APPROVED)
        db.commit()

    db.refresh(session)
    logger.info(
        "session_request_approved trainer_id=%s request_id=%s session_id=%s",
        trainer_id,
        request_id,
        session.id,
    )
    _log_reconciled_days(db, trainer_id, [session.date])

    message = (
        f"Your {session.category.lower()} session request for "
        f"{_format_slot(session.date, session.start_time)} has been approved."
    )
    if verdict.warnings:
        message += f" Note: {' '.join(verdict.warnings)}"
    _notify(notifier, trainer_id, session.client_id, NotificationKind.APPROVED, message, session.id)
    return session


def decline_request(
    db: Session,
    trainer_id: int,
    request_id: int,
    notifier: NotificationSink,
) -> SessionRequest:
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        request = get_request_or_404(db, trainer_id, request_id)
        if not request.is_pending:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=REQUEST_ALREADY_RESOLVED_DETAIL)
        request.resolve(SessionRequestStatus.DECLINED)
        db.commit()

    db.refresh(request)
    logger.info("session_request_declined trainer_id=%s request_id=%s", trainer_id, request_id)
    _notify(
        notifier,
        trainer_id,
        request.client_id,
        NotificationKind.DECLINED,
        f"Your {request.category.lower()} session request for "
        f"{_format_slot(request.requested_date, request.requested_start)} cannot be accommodated. "
        "Please pick a different time.",
    )
    return request


def create_session(
    db: Session,
    trainer_id: int,
    payload: SessionCreateRequest,
    now: datetime,
) -> TrainingSession | ValidationVerdict:
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        verdict = validate_request(db, trainer_id, payload.date, payload.start_time, payload.end_time, now=now)
        if not verdict.is_valid:
            db.rollback()
            return verdict

        session = TrainingSession(
            trainer_id=trainer_id,
            client_id=payload.client_id,
            client_name=payload.client_name,
            session_type=payload.session_type.value,
            category=payload.category,
            date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
            status=payload.status.value,
            location=payload.location,
            notes=payload.notes,
        )
        db.add(session)
        db.commit()

    db.refresh(session)
    SCHEDULE_TRANSITIONS.labels(kind="created").inc()
    logger.info("session_created trainer_id=%s session_id=%s date=%s", trainer_id, session.id, session.date)
    _log_reconciled_days(db, trainer_id, [session.date])
    return session


def cancel_session(
    db: Session,
    trainer_id: int,
    session_id: int,
    notifier: NotificationSink,
) -> TrainingSession:
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        session = get_session_or_404(db, trainer_id, session_id)
        if session.status == SessionStatus.COMPLETED.value:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=COMPLETED_SESSION_CANCEL_DETAIL)

        was_cancelled_now = False
        if session.status != SessionStatus.CANCELLED.value:
            session.cancel()
            was_cancelled_now = True
        db.commit()

    db.refresh(session)
    if was_cancelled_now:
        logger.info("session_cancelled trainer_id=%s session_id=%s", trainer_id, session_id)
        _log_reconciled_days(db, trainer_id, [session.date])
        _notify(
            notifier,
            trainer_id,
            session.client_id,
            NotificationKind.CANCELLED,
            f"Your {session.category.lower()} session on "
            f"{_format_slot(session.date, session.start_time)} has been cancelled. "
            "Please contact your trainer to reschedule.",
            session.id,
        )
    return session


def reschedule_session(
    db: Session,
    trainer_id: int,
    session_id: int,
    new_date: date,
    new_start: str,
    new_end: str,
    now: datetime,
    notifier: NotificationSink,
) -> TrainingSession | ValidationVerdict:
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        session = get_session_or_404(db, trainer_id, session_id)
        if not session.is_active:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SESSION_NOT_ACTIVE_DETAIL)

        verdict = validate_request(
            db,
            trainer_id,
            new_date,
            new_start,
            new_end,
            now=now,
            exclude_session_id=session.id,
        )
        if not verdict.is_valid:
            db.rollback()
            return verdict

        previous_date = session.date
        session.date = new_date
        session.start_time = new_start
        session.end_time = new_end
        db.commit()

    db.refresh(session)
    logger.info(
        "session_rescheduled trainer_id=%s session_id=%s from=%s to=%s %s-%s",
        trainer_id,
        session_id,
        previous_date,
        new_date,
        new_start,
        new_end,
    )
    _log_reconciled_days(db, trainer_id, [previous_date, new_date])
    _notify(
        notifier,
        trainer_id,
        session.client_id,
        NotificationKind.RESCHEDULED,
        f"Your {session.category.lower()} session has been rescheduled to "
        f"{_format_slot(new_date, new_start)}. Please confirm the new time works for you.",
        session.id,
    )
    return session


def _complete_trainer_sessions(db: Session, trainer_id: int, now: datetime) -> int:
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        candidates = db.scalars(
            select(TrainingSession).where(
                TrainingSession.trainer_id == trainer_id,
                TrainingSession.status == SessionStatus.CONFIRMED.value,
                TrainingSession.date <= now.date(),
            )
        ).all()

        now_minutes = now.hour * 60 + now.minute
        finished = [
            session
            for session in candidates
            if session.date < now.date() or to_minutes(session.end_time) <= now_minutes
        ]
        for session in finished:
            session.status = SessionStatus.COMPLETED.value
        db.commit()
    return len(finished)


def complete_finished_sessions(db: Session, now: datetime) -> int:
    """Mark confirmed sessions whose end has passed as completed.

    Each trainer's sessions are re-read and updated under that trainer's
    schedule lock, so a concurrent reschedule is either seen or waited for.
    """
    trainer_ids = db.scalars(
        select(TrainingSession.trainer_id)
        .where(
            TrainingSession.status == SessionStatus.CONFIRMED.value,
            TrainingSession.date <= now.date(),
        )
        .distinct()
        .order_by(TrainingSession.trainer_id)
    ).all()
    db.rollback()

    completed = 0
    for trainer_id in trainer_ids:
        completed += _complete_trainer_sessions(db, trainer_id, now)

    if completed:
        SCHEDULE_TRANSITIONS.labels(kind="completed").inc(completed)
        logger.info("sessions_completed count=%s trainers=%s", completed, len(trainer_ids))
    return completed
