from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.deps import Clock, get_clock, get_notifier
from app.api.pagination import DEFAULT_PAGE_SIZE, LimitParam, OffsetParam
from app.db.models import SessionStatus, SessionType, TrainingSession
from app.db.session import get_db
from app.schemas.session import SessionCreateRequest, SessionRescheduleRequest, SessionResponse, SessionView
from app.schemas.validation import ValidationVerdict
from app.services.calendar_service import build_session_calendar_ics
from app.services.notification_service import NotificationSink
from app.services.session_service import (
    cancel_session,
    create_session,
    get_session_or_404,
    list_sessions,
    reschedule_session,
)
from app.services.trainer_service import get_trainer_or_404

router = APIRouter(prefix="/trainers/{trainer_id}/sessions", tags=["sessions"])


def _session_or_conflict(result: TrainingSession | ValidationVerdict) -> SessionResponse:
    if isinstance(result, ValidationVerdict):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Session slot rejected", **result.model_dump()},
        )
    return SessionResponse.model_validate(result)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def book_session(
    trainer_id: int,
    payload: SessionCreateRequest,
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db),
) -> SessionResponse:
    return _session_or_conflict(create_session(db, trainer_id, payload, now=clock()))


@router.get("", response_model=list[SessionResponse], status_code=status.HTTP_200_OK)
def list_trainer_sessions(
    trainer_id: int,
    view: SessionView | None = Query(default=None),
    session_type: SessionType | None = Query(default=None),
    status_filter: SessionStatus | None = Query(default=None, alias="status"),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    limit: LimitParam = DEFAULT_PAGE_SIZE,
    offset: OffsetParam = 0,
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db),
) -> list[SessionResponse]:
    sessions = list_sessions(
        db,
        trainer_id,
        today=clock().date(),
        view=view,
        session_type=session_type.value if session_type else None,
        status_filter=status_filter.value if status_filter else None,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return [SessionResponse.model_validate(session) for session in sessions]


@router.get("/{session_id}", response_model=SessionResponse, status_code=status.HTTP_200_OK)
def get_session(trainer_id: int, session_id: int, db: Session = Depends(get_db)) -> SessionResponse:
    return SessionResponse.model_validate(get_session_or_404(db, trainer_id, session_id))


@router.patch("/{session_id}/cancel", response_model=SessionResponse, status_code=status.HTTP_200_OK)
def cancel_trainer_session(
    trainer_id: int,
    session_id: int,
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db),
) -> SessionResponse:
    session = cancel_session(db, trainer_id, session_id, notifier=notifier)
    return SessionResponse.model_validate(session)


@router.patch("/{session_id}/reschedule", response_model=SessionResponse, status_code=status.HTTP_200_OK)
def reschedule_trainer_session(
    trainer_id: int,
    session_id: int,
    payload: SessionRescheduleRequest,
    clock: Clock = Depends(get_clock),
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db),
) -> SessionResponse:
    result = reschedule_session(
        db,
        trainer_id,
        session_id,
        new_date=payload.date,
        new_start=payload.start_time,
        new_end=payload.end_time,
        now=clock(),
        notifier=notifier,
    )
    return _session_or_conflict(result)


@router.get("/{session_id}/calendar.ics", status_code=status.HTTP_200_OK)
def download_session_calendar_file(
    trainer_id: int,
    session_id: int,
    db: Session = Depends(get_db),
) -> Response:
    trainer = get_trainer_or_404(db, trainer_id)
    session = get_session_or_404(db, trainer_id, session_id)
    ics_content = build_session_calendar_ics(session, trainer_display_name=trainer.display_name)
    filename = f"session-{session.id}.ics"
    return Response(
        content=ics_content,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
