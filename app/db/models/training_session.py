from datetime import UTC, date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class SessionStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionType(str, Enum):
    PERSONAL = "personal"
    GROUP = "group"
    ASSESSMENT = "assessment"


ACTIVE_SESSION_STATUSES = frozenset({SessionStatus.PENDING.value, SessionStatus.CONFIRMED.value})


class TrainingSession(Base):
    __tablename__ = "training_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    trainer_id: Mapped[int] = mapped_column(
        ForeignKey("trainers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    client_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    client_name: Mapped[str] = mapped_column(String(120), nullable=False)
    session_type: Mapped[str] = mapped_column(String(20), nullable=False, default=SessionType.PERSONAL.value)
    category: Mapped[str] = mapped_column(String(60), nullable=False, default="Training")
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SessionStatus.CONFIRMED.value)
    location: Mapped[str] = mapped_column(String(120), nullable=False, default="TBD")
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    request_id: Mapped[int | None] = mapped_column(
        ForeignKey("session_requests.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    trainer = relationship("Trainer", back_populates="sessions")
    request = relationship("SessionRequest", back_populates="session")

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_SESSION_STATUSES

    def cancel(self) -> None:
        self.status = SessionStatus.CANCELLED.value
        self.cancelled_at = datetime.now(UTC)
