from datetime import UTC, date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.db.models.training_session import SessionType


class SessionRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class SessionRequest(Base):
    __tablename__ = "session_requests"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    trainer_id: Mapped[int] = mapped_column(
        ForeignKey("trainers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    client_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    client_name: Mapped[str] = mapped_column(String(120), nullable=False)
    session_type: Mapped[str] = mapped_column(String(20), nullable=False, default=SessionType.PERSONAL.value)
    category: Mapped[str] = mapped_column(String(60), nullable=False, default="Training")
    requested_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    requested_start: Mapped[str] = mapped_column(String(5), nullable=False)
    requested_end: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SessionRequestStatus.PENDING.value)
    message: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    trainer = relationship("Trainer", back_populates="session_requests")
    session = relationship("TrainingSession", back_populates="request", uselist=False)

    @property
    def is_pending(self) -> bool:
        return self.status == SessionRequestStatus.PENDING.value

    def resolve(self, status: SessionRequestStatus) -> None:
        self.status = status.value
        self.resolved_at = datetime.now(UTC)
