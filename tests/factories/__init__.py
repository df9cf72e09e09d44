"""Re-export factory functions for generating fake test data."""

# flake8: noqa: F401 – re-export

from .user import create_fake_user, fake_registration

__all__ = [
    "create_fake_user",
    "fake_registration",
]
