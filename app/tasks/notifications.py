import logging

from app.schemas.notification import NotificationEvent
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def deliver_notification(payload: dict) -> NotificationEvent:
    # Push and email delivery live outside this service; the worker records the hand-off.
    event = NotificationEvent.model_validate(payload)
    logger.info(
        "notification_delivered client_id=%s trainer_id=%s kind=%s session_id=%s",
        event.client_id,
        event.trainer_id,
        event.kind.value,
        event.session_id,
    )
    return event


@celery_app.task(name="notifications.deliver")
def deliver_notification_task(payload: dict) -> dict[str, str]:
    event = deliver_notification(payload)
    return {"kind": event.kind.value}
