import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("NOTIFICATION_BACKEND", "memory")
sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.api.deps import get_clock, get_notifier
from app.core.locks import schedule_locks
from app.db.base import Base
from app.db.models import SessionRequest, Trainer, TrainerAvailability, TrainingSession  # noqa: F401
from app.db.session import get_db
from app.main import app
from app.services.notification_service import InMemoryNotificationSink

# Monday; 2024-01-02 is the Tuesday most tests book against.
FIXED_NOW = datetime(2024, 1, 1, 8, 0)

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def reset_database() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    schedule_locks.reset()


@pytest.fixture()
def notifier() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(notifier) -> TestClient:
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
