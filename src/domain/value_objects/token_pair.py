"""Token Pair value object for one-time account tokens.

A token pair is minted whenever the account needs an out-of-band proof of
possession: email verification and password reset. The unhashed token is
delivered to the user exactly once; only the hashed token and the expiry are
persisted on the account.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class TokenPair:
    """One-time token with its storage digest and absolute expiry.

    Attributes:
        unhashed_token: Random token sent to the user, never persisted.
        hashed_token: Deterministic digest of `unhashed_token`, persisted.
        expires_at: Timezone-aware instant after which the token is invalid.
    """

    unhashed_token: str
    hashed_token: str
    expires_at: datetime

    def __post_init__(self) -> None:
        if not self.unhashed_token or not self.hashed_token:
            raise ValueError("Token pair values cannot be empty")
        if self.expires_at.tzinfo is None:
            raise ValueError("Token expiry must be timezone aware")

    def is_expired(self, current_time: datetime) -> bool:
        """The expiry instant itself is already expired (exclusive upper bound)."""
        return current_time >= self.expires_at

    def time_remaining(self, current_time: datetime) -> timedelta:
        return self.expires_at - current_time

    def mask_for_logging(self) -> str:
        return f"{self.hashed_token[:8]}..."

    def __repr__(self) -> str:
        return f"TokenPair(hashed_token='{self.hashed_token[:8]}...', expires_at={self.expires_at.isoformat()})"
