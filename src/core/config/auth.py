"""Authentication settings: JWT signing, token lifetimes and password hashing.
"""

import logging
from pathlib import Path

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

SYMMETRIC_ALGORITHMS = ("HS256", "HS384", "HS512")
ASYMMETRIC_ALGORITHMS = ("RS256", "RS384", "RS512", "ES256", "ES384")


class AuthSettings(BaseSettings):
    """Defines settings for session tokens and one-time account tokens.

    Access and refresh tokens are JWTs. With an HMAC algorithm (the default) they
    are signed with two distinct secrets so a refresh token can never be accepted
    as an access token and vice versa. With an asymmetric algorithm both are
    signed with JWT_PRIVATE_KEY, loaded from ``private.pem``/``public.pem`` when
    those files exist, and told apart by their ``type`` claim.

    Security Note:
        - Secrets and keys must be securely stored and rotated regularly to
          prevent token forgery (OWASP A02:2021 - Cryptographic Failures).
        - Ensure PEM files are readable only by the application user (chmod 600).
    """

    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_SECRET: SecretStr = SecretStr("")
    REFRESH_TOKEN_SECRET: SecretStr = SecretStr("")
    JWT_PRIVATE_KEY: SecretStr = SecretStr("")
    JWT_PUBLIC_KEY: str = ""
    JWT_ISSUER: str = "credence"
    JWT_AUDIENCE: str = "credence:api:v1"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(ge=1, default=15)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(ge=1, default=7)
    EMAIL_VERIFICATION_TOKEN_EXPIRE_MINUTES: int = Field(ge=1, default=20)
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = Field(ge=1, default=20)

    BCRYPT_ROUNDS: int = Field(ge=4, le=31, default=12)

    # Clears the whole refresh chain when a superseded refresh token is replayed.
    REVOKE_SESSION_ON_REFRESH_REUSE: bool = False

    @model_validator(mode="after")
    def _load_and_validate_signing_keys(self) -> "AuthSettings":
        """Loads asymmetric keys from PEM files if needed and validates key material.

        Raises:
            ValueError: If the algorithm is unsupported or its keys are missing.
        """
        if self.JWT_ALGORITHM in SYMMETRIC_ALGORITHMS:
            access = self.ACCESS_TOKEN_SECRET.get_secret_value()
            refresh = self.REFRESH_TOKEN_SECRET.get_secret_value()
            if len(access) < 32 or len(refresh) < 32:
                error_msg = (
                    "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must each be at least "
                    "32 characters long."
                )
                logger.error(error_msg)
                raise ValueError(error_msg)
            if access == refresh:
                error_msg = "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ."
                logger.error(error_msg)
                raise ValueError(error_msg)
        elif self.JWT_ALGORITHM in ASYMMETRIC_ALGORITHMS:
            self._load_keys_from_pem_files()
            if not self.JWT_PRIVATE_KEY.get_secret_value() or not self.JWT_PUBLIC_KEY:
                error_msg = (
                    "JWT keys not found. Please provide JWT_PRIVATE_KEY and JWT_PUBLIC_KEY "
                    "either via .env variables or through private.pem/public.pem files."
                )
                logger.error(error_msg)
                raise ValueError(error_msg)
        else:
            raise ValueError(f"Unsupported JWT_ALGORITHM: {self.JWT_ALGORITHM}")

        return self

    def _load_keys_from_pem_files(self) -> None:
        """Loads JWT keys from private.pem and public.pem if they exist.

        These files override any existing environment variables.
        """
        private_key_path = Path("private.pem").resolve()
        public_key_path = Path("public.pem").resolve()

        if private_key_path.is_file():
            private_key = private_key_path.read_text().strip()
            if private_key:
                self.JWT_PRIVATE_KEY = SecretStr(private_key)
                logger.info("Loaded JWT private key from private.pem, overriding env var if set.")

        if public_key_path.is_file():
            public_key = public_key_path.read_text().strip()
            if public_key:
                self.JWT_PUBLIC_KEY = public_key
                logger.info("Loaded JWT public key from public.pem, overriding env var if set.")

    @property
    def uses_symmetric_signing(self) -> bool:
        return self.JWT_ALGORITHM in SYMMETRIC_ALGORITHMS

    def signing_key(self, token_type: str) -> str:
        """Key used to sign tokens of the given type ("access" or "refresh")."""
        if not self.uses_symmetric_signing:
            return self.JWT_PRIVATE_KEY.get_secret_value()
        if token_type == "refresh":
            return self.REFRESH_TOKEN_SECRET.get_secret_value()
        return self.ACCESS_TOKEN_SECRET.get_secret_value()

    def verification_key(self, token_type: str) -> str:
        """Key used to verify tokens of the given type ("access" or "refresh")."""
        if not self.uses_symmetric_signing:
            return self.JWT_PUBLIC_KEY
        return self.signing_key(token_type)
