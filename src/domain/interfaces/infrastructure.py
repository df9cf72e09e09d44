"""Infrastructure service interfaces for cross-cutting concerns.

This module defines the collaborators the account domain depends on but does
not implement: event publishing, the wall clock, notification rendering and
notification delivery.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from src.domain.entities.user import User
from src.domain.events.account_events import BaseDomainEvent
from src.domain.value_objects.notification import Notification


class IEventPublisher(ABC):
    """Interface for domain event publishing and distribution.

    Decouples the part of the domain that raises an event (e.g. a detected
    refresh token replay) from the listeners that handle it.
    """

    @abstractmethod
    async def publish(self, event: BaseDomainEvent) -> None:
        """Publishes a single domain event."""
        raise NotImplementedError

    @abstractmethod
    async def publish_many(self, events: List[BaseDomainEvent]) -> None:
        """Publishes a list of domain events."""
        raise NotImplementedError


class IClock(ABC):
    """Single time source for every expiry comparison."""

    @abstractmethod
    def now(self) -> datetime:
        """Returns the current time as a timezone-aware UTC datetime."""
        raise NotImplementedError


class INotificationRenderer(ABC):
    """Turns an account and a one-time token into a deliverable message."""

    @abstractmethod
    def render_email_verification(self, user: User, unhashed_token: str) -> Notification:
        raise NotImplementedError

    @abstractmethod
    def render_password_reset(self, user: User, unhashed_token: str) -> Notification:
        raise NotImplementedError


class INotificationSink(ABC):
    """Out-of-band delivery channel for rendered notifications.

    Implementations raise `NotificationError` when a message cannot be
    delivered; they never retry silently.
    """

    @abstractmethod
    async def send(self, notification: Notification) -> None:
        raise NotImplementedError
