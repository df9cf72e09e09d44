"""Domain Value Objects for the account domain.

Value objects are immutable objects that describe domain concepts by their attributes
rather than their identity.
"""

from .notification import Notification, NotificationOutcome
from .predicates import AccountPredicate, AllOf, AnyOf, FieldAfter, FieldEquals, FieldIsNull, all_of, any_of
from .session_tokens import ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE, SessionTokens, TokenClaims
from .token_pair import TokenPair

__all__ = [
    "AccountPredicate",
    "AllOf",
    "AnyOf",
    "FieldAfter",
    "FieldEquals",
    "FieldIsNull",
    "all_of",
    "any_of",
    "Notification",
    "NotificationOutcome",
    "SessionTokens",
    "TokenClaims",
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "TokenPair",
]
