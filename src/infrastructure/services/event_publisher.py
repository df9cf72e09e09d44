"""Event Publisher Infrastructure Service.

Concrete implementation of the domain event publishing interface. Events are
kept in memory for inspection and handed to any registered subscribers, e.g. a
security monitor listening for refresh token reuse.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Type

import structlog

from src.domain.events.account_events import BaseDomainEvent
from src.domain.interfaces.infrastructure import IEventPublisher

logger = structlog.get_logger(__name__)

EventSubscriber = Callable[[BaseDomainEvent], Awaitable[None]]


class InMemoryEventPublisher(IEventPublisher):
    """In-memory event publisher.

    A failing subscriber is logged and never fails the domain operation that
    raised the event.
    """

    def __init__(self):
        self._published_events: List[BaseDomainEvent] = []
        self._subscribers: List[EventSubscriber] = []

    async def publish(self, event: BaseDomainEvent) -> None:
        self._published_events.append(event)
        event_type = type(event).__name__

        if self._subscribers:
            results = await asyncio.gather(
                *(subscriber(event) for subscriber in self._subscribers),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, Exception):
                    logger.error(
                        "Event subscriber failed",
                        event_type=event_type,
                        error=str(result),
                        error_type=type(result).__name__,
                    )

        logger.info(
            "Domain event published",
            event_type=event_type,
            user_id=event.user_id,
            correlation_id=event.correlation_id,
            occurred_at=event.occurred_at.isoformat(),
        )

    async def publish_many(self, events: List[BaseDomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    def add_subscriber(self, callback: EventSubscriber) -> None:
        self._subscribers.append(callback)

    def get_published_events(
        self,
        event_type: Optional[Type[BaseDomainEvent]] = None,
        user_id: Optional[int] = None,
    ) -> List[BaseDomainEvent]:
        """Get published events with optional filtering.

        Args:
            event_type: Only events that are instances of this class
            user_id: Only events about this account
        """
        events = self._published_events
        if event_type is not None:
            events = [e for e in events if isinstance(e, event_type)]
        if user_id is not None:
            events = [e for e in events if e.user_id == user_id]
        return list(events)

    def clear_published_events(self) -> None:
        self._published_events.clear()
