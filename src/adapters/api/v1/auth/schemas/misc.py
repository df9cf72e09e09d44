from __future__ import annotations

"""Miscellaneous utility schemas used by the auth API."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Simple envelope used for *200* or *202* acknowledgments."""

    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationResponse(MessageResponse):
    """Acknowledgment of an operation that sends an email.

    ``notification_delivered`` is false when the state change was committed
    but the email could not be sent; the user should ask for a resend.
    """

    notification_delivered: bool
    error_code: Optional[str] = None
