import logging
from abc import ABC, abstractmethod

from app.core.config import settings
from app.schemas.notification import NotificationEvent
from app.tasks.notifications import deliver_notification_task

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    @abstractmethod
    def publish(self, event: NotificationEvent) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    def publish(self, event: NotificationEvent) -> None:
        logger.info(
            "notification_logged client_id=%s kind=%s message=%r",
            event.client_id,
            event.kind.value,
            event.message,
        )


class InMemoryNotificationSink(NotificationSink):
    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def publish(self, event: NotificationEvent) -> None:
        self.events.append(event)

    def reset(self) -> None:
        self.events.clear()


class CeleryNotificationSink(NotificationSink):
    def publish(self, event: NotificationEvent) -> None:
        deliver_notification_task.delay(event.model_dump(mode="json"))


class FallbackNotificationSink(NotificationSink):
    def __init__(self, primary: NotificationSink, fallback: NotificationSink) -> None:
        self._primary = primary
        self._fallback = fallback

    def publish(self, event: NotificationEvent) -> None:
        try:
            self._primary.publish(event)
        except Exception:
            logger.warning("notification_enqueue_failed kind=%s client_id=%s", event.kind.value, event.client_id)
            self._fallback.publish(event)


def _build_notification_sink() -> NotificationSink:
    backend = settings.notification_backend.strip().lower()
    if backend == "memory":
        return InMemoryNotificationSink()
    if backend == "celery":
        return FallbackNotificationSink(primary=CeleryNotificationSink(), fallback=LoggingNotificationSink())
    return LoggingNotificationSink()


notification_sink: NotificationSink = _build_notification_sink()
