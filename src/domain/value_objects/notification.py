"""Notification value object handed to a notification sink."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Notification:
    """A rendered message ready for out-of-band delivery.

    Attributes:
        recipient: Destination email address.
        subject: Message subject line.
        rendered_body: HTML body, already rendered. May contain a one-time
            token and must therefore never be logged.
        text_body: Optional plain-text alternative.
        one_time_token: The unhashed token the message delivers, if any.
    """

    recipient: str
    subject: str
    rendered_body: str = field(repr=False)
    text_body: Optional[str] = field(default=None, repr=False)
    one_time_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class NotificationOutcome:
    """Result of handing a notification to the sink after a committed change.

    Attributes:
        delivered: Whether the sink accepted the message in time.
        error_code: Stable error code when delivery failed.
    """

    delivered: bool
    error_code: Optional[str] = None
