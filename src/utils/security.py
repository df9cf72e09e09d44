"""Security utilities for password hashing and verification.

Passwords are hashed with bcrypt through passlib. The work factor comes from
`AuthSettings.BCRYPT_ROUNDS`; the hasher is built once per application context
and shared by every service that needs it.
"""

from passlib.context import CryptContext


class PasswordHasher:
    """Salted one-way password hashing.

    Args:
        rounds: bcrypt work factor (log2 of the iteration count).
    """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password to hash

        Returns:
            str: Bcrypt-hashed password with an embedded random salt
        """
        return self._context.hash(password)

    def verify(self, password: str, hashed_password: str) -> bool:
        """Verify a password against its hash.

        Uses bcrypt's constant-time comparison. A malformed or unknown hash
        verifies as `False` rather than raising.

        Args:
            password: Plain text password to verify
            hashed_password: Bcrypt hash to verify against

        Returns:
            bool: True if password matches hash
        """
        if not hashed_password:
            return False
        try:
            return self._context.verify(password, hashed_password)
        except (ValueError, TypeError):
            return False
