"""Export account domain entities for use across the application."""

from .user import CREDENTIAL_FIELDS, AccountState, User

__all__ = ["User", "AccountState", "CREDENTIAL_FIELDS"]
