import logging
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.locks import schedule_locks
from app.db.models import ACTIVE_SESSION_STATUSES, TrainerAvailability, TrainingSession
from app.schemas.availability import AvailabilitySlot, TimeInterval, WeeklyAvailabilityDay
from app.services.intervals import overlaps
from app.services.reconciliation import reconcile_day
from app.services.trainer_service import get_trainer_or_404

logger = logging.getLogger(__name__)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

SLOT_OVERLAP_DETAIL = "Time slot overlaps with existing slot"
SLOT_NOT_FOUND_DETAIL = "Time slot not found"


def _check_day(day_of_week: int) -> None:
    if not 0 <= day_of_week <= 6:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="day_of_week must be between 0 (Sunday) and 6 (Saturday)",
        )


def get_template_slots(db: Session, trainer_id: int, day_of_week: int | None = None) -> list[TrainerAvailability]:
    # HH:MM strings are zero-padded, so string order is time order.
    query = select(TrainerAvailability).where(TrainerAvailability.trainer_id == trainer_id)
    if day_of_week is not None:
        query = query.where(TrainerAvailability.day_of_week == day_of_week)
    query = query.order_by(
        TrainerAvailability.day_of_week,
        TrainerAvailability.start_time,
        TrainerAvailability.id,
    )
    return list(db.scalars(query).all())


def get_active_sessions(db: Session, trainer_id: int, on_date: date | None = None) -> list[TrainingSession]:
    query = select(TrainingSession).where(
        TrainingSession.trainer_id == trainer_id,
        TrainingSession.status.in_(ACTIVE_SESSION_STATUSES),
    )
    if on_date is not None:
        query = query.where(TrainingSession.date == on_date)
    return list(db.scalars(query.order_by(TrainingSession.date, TrainingSession.start_time, TrainingSession.id)).all())


def get_reconciled_availability(
    db: Session,
    trainer_id: int,
    day_of_week: int,
    on_date: date | None = None,
) -> list[AvailabilitySlot]:
    _check_day(day_of_week)
    get_trainer_or_404(db, trainer_id)
    return reconcile_day(
        get_template_slots(db, trainer_id, day_of_week),
        get_active_sessions(db, trainer_id, on_date=on_date),
        day_of_week,
        on_date=on_date,
    )


def get_weekly_availability(db: Session, trainer_id: int) -> list[WeeklyAvailabilityDay]:
    get_trainer_or_404(db, trainer_id)
    slots = get_template_slots(db, trainer_id)
    weekly: list[WeeklyAvailabilityDay] = []
    for index, name in enumerate(DAY_NAMES):
        day_slots = [slot for slot in slots if slot.day_of_week == index]
        weekly.append(
            WeeklyAvailabilityDay(
                day=name,
                day_of_week=index,
                is_available=any(slot.is_available for slot in day_slots),
                time_slots=[TimeInterval(start=slot.start_time, end=slot.end_time) for slot in day_slots],
            )
        )
    return weekly


def toggle_day_availability(db: Session, trainer_id: int, day_of_week: int) -> list[TrainerAvailability]:
    _check_day(day_of_week)
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        day_slots = get_template_slots(db, trainer_id, day_of_week)
        for slot in day_slots:
            slot.is_available = not slot.is_available
        db.commit()

    logger.info(
        "day_availability_toggled trainer_id=%s day_of_week=%s slots=%s",
        trainer_id,
        day_of_week,
        len(day_slots),
    )
    for slot in day_slots:
        db.refresh(slot)
    return day_slots


def upsert_time_slot(
    db: Session,
    trainer_id: int,
    day_of_week: int,
    interval: TimeInterval,
    replace_index: int | None = None,
) -> TrainerAvailability:
    """Add a template interval to a day, or replace the one at ``replace_index``.

    Indexes refer to the day's slots ordered by start time. A new slot takes
    the day's current on/off state so a toggled-off day stays off.
    """
    _check_day(day_of_week)
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        day_slots = get_template_slots(db, trainer_id, day_of_week)

        target: TrainerAvailability | None = None
        if replace_index is not None:
            if replace_index >= len(day_slots):
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SLOT_NOT_FOUND_DETAIL)
            target = day_slots[replace_index]

        for slot in day_slots:
            if slot is target:
                continue
            if overlaps(interval.start, interval.end, slot.start_time, slot.end_time):
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SLOT_OVERLAP_DETAIL)

        if target is None:
            target = TrainerAvailability(
                trainer_id=trainer_id,
                day_of_week=day_of_week,
                is_available=any(slot.is_available for slot in day_slots) if day_slots else True,
            )
            db.add(target)
        target.start_time = interval.start
        target.end_time = interval.end
        db.commit()

    db.refresh(target)
    logger.info(
        "time_slot_saved trainer_id=%s day_of_week=%s slot_id=%s start=%s end=%s replaced=%s",
        trainer_id,
        day_of_week,
        target.id,
        target.start_time,
        target.end_time,
        replace_index is not None,
    )
    return target


def remove_time_slot(db: Session, trainer_id: int, day_of_week: int, index: int) -> None:
    _check_day(day_of_week)
    with schedule_locks.hold(trainer_id):
        get_trainer_or_404(db, trainer_id, for_update=True)
        day_slots = get_template_slots(db, trainer_id, day_of_week)
        if not 0 <= index < len(day_slots):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SLOT_NOT_FOUND_DETAIL)
        slot = day_slots[index]
        db.delete(slot)
        db.commit()

    logger.info("time_slot_removed trainer_id=%s day_of_week=%s index=%s", trainer_id, day_of_week, index)
