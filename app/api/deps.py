from collections.abc import Callable
from datetime import datetime

from app.services.notification_service import NotificationSink, notification_sink

Clock = Callable[[], datetime]


def get_notifier() -> NotificationSink:
    return notification_sink


def get_clock() -> Clock:
    # Naive local wall-clock time, matching the zone-less session times.
    return datetime.now
