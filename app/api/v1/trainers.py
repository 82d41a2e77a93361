from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.deps import Clock, get_clock
from app.db.session import get_db
from app.schemas.availability import (
    AvailabilitySlot,
    TemplateSlotResponse,
    TimeInterval,
    TimeSlotUpsertRequest,
    WeeklyAvailabilityDay,
)
from app.schemas.calendar import CalendarMode, CalendarShift, CalendarWindowResponse
from app.schemas.trainer import TrainerCreateRequest, TrainerResponse
from app.schemas.validation import ValidationRequest, ValidationVerdict
from app.services.availability_service import (
    get_reconciled_availability,
    get_template_slots,
    get_weekly_availability,
    remove_time_slot,
    toggle_day_availability,
    upsert_time_slot,
)
from app.services.calendar_service import get_calendar_window
from app.services.conflict_service import validate_request
from app.services.intervals import day_of_week as weekday_index
from app.services.trainer_service import create_trainer, get_trainer_or_404

router = APIRouter(prefix="/trainers", tags=["trainers"])

DayOfWeek = Annotated[int, Path(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")]


@router.post("", response_model=TrainerResponse, status_code=status.HTTP_201_CREATED)
def register_trainer(
    payload: TrainerCreateRequest,
    db: Session = Depends(get_db),
) -> TrainerResponse:
    trainer = create_trainer(db=db, payload=payload)
    return TrainerResponse.model_validate(trainer)


@router.get("/{trainer_id}", response_model=TrainerResponse, status_code=status.HTTP_200_OK)
def get_trainer(trainer_id: int, db: Session = Depends(get_db)) -> TrainerResponse:
    return TrainerResponse.model_validate(get_trainer_or_404(db, trainer_id))


@router.get(
    "/{trainer_id}/availability/template",
    response_model=list[TemplateSlotResponse],
    status_code=status.HTTP_200_OK,
)
def list_template(trainer_id: int, db: Session = Depends(get_db)) -> list[TemplateSlotResponse]:
    get_trainer_or_404(db, trainer_id)
    return [TemplateSlotResponse.model_validate(slot) for slot in get_template_slots(db, trainer_id)]


@router.get(
    "/{trainer_id}/availability/weekly",
    response_model=list[WeeklyAvailabilityDay],
    status_code=status.HTTP_200_OK,
)
def weekly_availability(trainer_id: int, db: Session = Depends(get_db)) -> list[WeeklyAvailabilityDay]:
    return get_weekly_availability(db, trainer_id)


@router.get(
    "/{trainer_id}/availability/days/{day_of_week}",
    response_model=list[AvailabilitySlot],
    status_code=status.HTTP_200_OK,
)
def reconciled_availability(
    trainer_id: int,
    day_of_week: DayOfWeek,
    date_filter: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
) -> list[AvailabilitySlot]:
    if date_filter is not None and weekday_index(date_filter) != day_of_week:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="date does not fall on the requested day_of_week",
        )
    return get_reconciled_availability(db, trainer_id, day_of_week, on_date=date_filter)


@router.post(
    "/{trainer_id}/availability/days/{day_of_week}/toggle",
    response_model=list[TemplateSlotResponse],
    status_code=status.HTTP_200_OK,
)
def toggle_day(
    trainer_id: int,
    day_of_week: DayOfWeek,
    db: Session = Depends(get_db),
) -> list[TemplateSlotResponse]:
    slots = toggle_day_availability(db, trainer_id, day_of_week)
    return [TemplateSlotResponse.model_validate(slot) for slot in slots]


@router.put(
    "/{trainer_id}/availability/days/{day_of_week}/slots",
    response_model=TemplateSlotResponse,
    status_code=status.HTTP_200_OK,
)
def save_time_slot(
    trainer_id: int,
    day_of_week: DayOfWeek,
    payload: TimeSlotUpsertRequest,
    db: Session = Depends(get_db),
) -> TemplateSlotResponse:
    slot = upsert_time_slot(
        db,
        trainer_id,
        day_of_week,
        TimeInterval(start=payload.start, end=payload.end),
        replace_index=payload.replace_index,
    )
    return TemplateSlotResponse.model_validate(slot)


@router.delete(
    "/{trainer_id}/availability/days/{day_of_week}/slots/{index}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_time_slot(
    trainer_id: int,
    day_of_week: DayOfWeek,
    index: Annotated[int, Path(ge=0)],
    db: Session = Depends(get_db),
) -> Response:
    remove_time_slot(db, trainer_id, day_of_week, index)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{trainer_id}/validate", response_model=ValidationVerdict, status_code=status.HTTP_200_OK)
def validate_slot(
    trainer_id: int,
    payload: ValidationRequest,
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db),
) -> ValidationVerdict:
    get_trainer_or_404(db, trainer_id)
    return validate_request(
        db,
        trainer_id,
        payload.date,
        payload.start,
        payload.end,
        now=clock(),
        exclude_session_id=payload.exclude_session_id,
    )


@router.get("/{trainer_id}/calendar", response_model=CalendarWindowResponse, status_code=status.HTTP_200_OK)
def calendar_window(
    trainer_id: int,
    anchor: date | None = Query(default=None),
    mode: CalendarMode = Query(default=CalendarMode.WEEK),
    shift: CalendarShift | None = Query(default=None),
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db),
) -> CalendarWindowResponse:
    today = clock().date()
    return get_calendar_window(db, trainer_id, anchor or today, mode, today, shift=shift)
