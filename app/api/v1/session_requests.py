from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import Clock, get_clock, get_notifier
from app.api.pagination import DEFAULT_PAGE_SIZE, LimitParam, OffsetParam
from app.db.models import SessionRequestStatus
from app.db.session import get_db
from app.schemas.session import SessionResponse
from app.schemas.session_request import SessionRequestCreate, SessionRequestResponse
from app.schemas.validation import ValidationVerdict
from app.services.notification_service import NotificationSink
from app.services.session_service import approve_request, create_request, decline_request, list_requests

router = APIRouter(prefix="/trainers/{trainer_id}/requests", tags=["session-requests"])


@router.post("", response_model=SessionRequestResponse, status_code=status.HTTP_201_CREATED)
def submit_request(
    trainer_id: int,
    payload: SessionRequestCreate,
    db: Session = Depends(get_db),
) -> SessionRequestResponse:
    return SessionRequestResponse.model_validate(create_request(db, trainer_id, payload))


@router.get("", response_model=list[SessionRequestResponse], status_code=status.HTTP_200_OK)
def list_trainer_requests(
    trainer_id: int,
    status_filter: SessionRequestStatus | None = Query(default=None, alias="status"),
    limit: LimitParam = DEFAULT_PAGE_SIZE,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> list[SessionRequestResponse]:
    requests = list_requests(
        db,
        trainer_id,
        status_filter=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )
    return [SessionRequestResponse.model_validate(request) for request in requests]


@router.patch("/{request_id}/approve", response_model=SessionResponse, status_code=status.HTTP_200_OK)
def approve_trainer_request(
    trainer_id: int,
    request_id: int,
    clock: Clock = Depends(get_clock),
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db),
) -> SessionResponse:
    result = approve_request(db, trainer_id, request_id, now=clock(), notifier=notifier)
    if isinstance(result, ValidationVerdict):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Session request cannot be approved", **result.model_dump()},
        )
    return SessionResponse.model_validate(result)


@router.patch("/{request_id}/decline", response_model=SessionRequestResponse, status_code=status.HTTP_200_OK)
def decline_trainer_request(
    trainer_id: int,
    request_id: int,
    notifier: NotificationSink = Depends(get_notifier),
    db: Session = Depends(get_db),
) -> SessionRequestResponse:
    return SessionRequestResponse.model_validate(decline_request(db, trainer_id, request_id, notifier=notifier))
