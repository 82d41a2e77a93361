from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Trainer(Base):
    __tablename__ = "trainers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    availability = relationship("TrainerAvailability", back_populates="trainer", cascade="all, delete-orphan")
    sessions = relationship("TrainingSession", back_populates="trainer")
    session_requests = relationship("SessionRequest", back_populates="trainer")
