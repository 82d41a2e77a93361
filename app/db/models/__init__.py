from app.db.models.session_request import SessionRequest, SessionRequestStatus
from app.db.models.trainer import Trainer
from app.db.models.trainer_availability import TrainerAvailability
from app.db.models.training_session import (
    ACTIVE_SESSION_STATUSES,
    SessionStatus,
    SessionType,
    TrainingSession,
)

__all__ = [
    "Trainer",
    "TrainerAvailability",
    "TrainingSession",
    "SessionStatus",
    "SessionType",
    "ACTIVE_SESSION_STATUSES",
    "SessionRequest",
    "SessionRequestStatus",
]
