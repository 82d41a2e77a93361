from datetime import datetime

from app.db.session import SessionLocal
from app.services.session_service import complete_finished_sessions
from app.tasks.celery_app import celery_app


@celery_app.task(name="sessions.complete_finished")
def complete_finished_sessions_task() -> dict[str, int]:
    db = SessionLocal()
    try:
        completed_count = complete_finished_sessions(db=db, now=datetime.now())
        return {"completed": completed_count}
    finally:
        db.close()
