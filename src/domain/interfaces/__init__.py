"""Domain Interfaces for dependency inversion.

These interfaces define contracts that infrastructure adapters must implement,
keeping the account domain free of storage, transport and delivery details.
"""

# Repository interfaces
from .repositories import IAccountStore

# Infrastructure interfaces
from .infrastructure import IClock, IEventPublisher, INotificationRenderer, INotificationSink

__all__ = [
    "IAccountStore",
    "IClock",
    "IEventPublisher",
    "INotificationRenderer",
    "INotificationSink",
]
