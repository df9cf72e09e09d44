"""Infrastructure Services.

Concrete implementations of the domain's infrastructure interfaces:

- Clock: system wall clock
- Events: in-memory domain event publishing
- Email: Jinja2 rendering and delivery of account notifications
"""

from .clock import SystemClock
from .email import (
    InMemoryNotificationSink,
    LoggingNotificationSink,
    NotificationRenderer,
    SmtpNotificationSink,
    build_notification_sink,
)
from .event_publisher import InMemoryEventPublisher

__all__ = [
    "SystemClock",
    "InMemoryEventPublisher",
    "NotificationRenderer",
    "InMemoryNotificationSink",
    "LoggingNotificationSink",
    "SmtpNotificationSink",
    "build_notification_sink",
]
