"""Token Codec domain service.

Mints random one-time tokens and derives the digest that is stored in place of
them. The digest is unsalted on purpose: it is used for equality lookups of
"which account holds this token", not for password storage.
"""

import hashlib
import secrets
from datetime import timedelta
from typing import Callable

import structlog

from src.core.exceptions import TokenGenerationError
from src.domain.interfaces.infrastructure import IClock
from src.domain.value_objects.token_pair import TokenPair

logger = structlog.get_logger(__name__)

RandomSource = Callable[[int], bytes]


class TokenCodec:
    """Generates token pairs and hashes presented tokens.

    Args:
        clock: Time source used to compute absolute expiries.
        random_source: Callable returning `n` cryptographically secure random
            bytes. Defaults to `secrets.token_bytes`; tests inject a seeded
            source for reproducible tokens.
        token_bytes: Entropy of each token in bytes (at least 32).
    """

    MIN_TOKEN_BYTES = 32

    def __init__(
        self,
        clock: IClock,
        random_source: RandomSource = secrets.token_bytes,
        token_bytes: int = MIN_TOKEN_BYTES,
    ):
        if token_bytes < self.MIN_TOKEN_BYTES:
            raise ValueError(f"Tokens need at least {self.MIN_TOKEN_BYTES} bytes of entropy")
        self._clock = clock
        self._random_source = random_source
        self._token_bytes = token_bytes

    def generate_token(self) -> str:
        """Returns a new random token, hex encoded.

        Raises:
            TokenGenerationError: If the random source fails or returns fewer
                bytes than requested. There is no fallback source.
        """
        try:
            raw = self._random_source(self._token_bytes)
        except Exception as e:
            logger.critical("Secure random source failed", error=str(e), error_type=type(e).__name__)
            raise TokenGenerationError() from e

        if not isinstance(raw, (bytes, bytearray)) or len(raw) < self._token_bytes:
            logger.critical(
                "Secure random source returned insufficient entropy",
                requested_bytes=self._token_bytes,
                received_bytes=len(raw) if isinstance(raw, (bytes, bytearray)) else None,
            )
            raise TokenGenerationError()

        return bytes(raw[: self._token_bytes]).hex()

    @staticmethod
    def hash(token: str) -> str:
        """Deterministic sha256 hex digest of `token`."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def generate_token_pair(self, ttl: timedelta) -> TokenPair:
        """Mints a one-time token, its digest and its absolute expiry.

        Args:
            ttl: Lifetime of the token from now.

        Returns:
            TokenPair: The unhashed token for delivery, the digest for storage.
        """
        unhashed_token = self.generate_token()
        pair = TokenPair(
            unhashed_token=unhashed_token,
            hashed_token=self.hash(unhashed_token),
            expires_at=self._clock.now() + ttl,
        )
        logger.debug("Token pair generated", token_prefix=pair.mask_for_logging(), expires_at=pair.expires_at.isoformat())
        return pair

    @staticmethod
    def matches(token: str, hashed_token: str) -> bool:
        """Constant-time check that `token` hashes to `hashed_token`."""
        if not token or not hashed_token:
            return False
        return secrets.compare_digest(TokenCodec.hash(token), hashed_token)
