from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import Trainer
from app.schemas.trainer import TrainerCreateRequest


def create_trainer(db: Session, payload: TrainerCreateRequest) -> Trainer:
    trainer = Trainer(display_name=payload.display_name.strip())
    db.add(trainer)
    db.commit()
    db.refresh(trainer)
    return trainer


def get_trainer_or_404(db: Session, trainer_id: int, for_update: bool = False) -> Trainer:
    query = select(Trainer).where(Trainer.id == trainer_id)
    if for_update:
        query = query.with_for_update()
    trainer = db.scalar(query)
    if not trainer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trainer not found")
    return trainer
