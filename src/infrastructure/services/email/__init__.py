from .notification_renderer import NotificationRenderer
from .notification_sinks import (
    InMemoryNotificationSink,
    LoggingNotificationSink,
    SmtpNotificationSink,
    build_notification_sink,
)

__all__ = [
    "NotificationRenderer",
    "InMemoryNotificationSink",
    "LoggingNotificationSink",
    "SmtpNotificationSink",
    "build_notification_sink",
]
