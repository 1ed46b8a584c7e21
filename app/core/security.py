"""Password hashing and signed bearer tokens (identity and email verification)."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any
from uuid import UUID

import bcrypt
import jwt

from app.core.exceptions import InvalidTokenError

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); fixed so existing hashes and new ones stay comparable in cost.
BCRYPT_ROUNDS = 10

# Min/max lengths for email and password validation.
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

TOKEN_PURPOSE_IDENTITY = "identity"
TOKEN_PURPOSE_EMAIL_VERIFICATION = "email_verification"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. False when no hash is stored."""
    if not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class TokenClaims:
    """Validated claims of a bearer token."""

    subject: str
    purpose: str
    issued_at: datetime
    expires_at: datetime

    @property
    def account_id(self) -> UUID:
        """Subject as an account id. Raises InvalidTokenError if it is not a UUID."""
        try:
            return UUID(self.subject)
        except ValueError as e:
            raise InvalidTokenError("Invalid token payload.") from e


class TokenIssuer:
    """
    Signs and verifies HMAC JWTs carrying a subject, a purpose, and an expiry.

    TTLs are timedeltas so callers never have to guess the unit. Tokens are not
    revocable; they stay valid until they expire.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        identity_ttl: timedelta = timedelta(seconds=60),
        verification_ttl: timedelta = timedelta(hours=24),
    ) -> None:
        if not secret:
            raise ValueError("Token secret must be non-empty")
        self._secret = secret
        self._algorithm = algorithm
        self.identity_ttl = identity_ttl
        self.verification_ttl = verification_ttl

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenIssuer":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            identity_ttl=timedelta(seconds=settings.IDENTITY_TOKEN_TTL_SECONDS),
            verification_ttl=timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS),
        )

    def _issue(
        self,
        subject: str | UUID,
        purpose: str,
        ttl: timedelta,
        now: datetime | None,
    ) -> str:
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(subject),
            "purpose": purpose,
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_identity_token(
        self,
        account_id: str | UUID,
        ttl: timedelta | None = None,
        now: datetime | None = None,
    ) -> str:
        """Short-lived token that lets a client pick up a session right after login."""
        return self._issue(
            account_id,
            TOKEN_PURPOSE_IDENTITY,
            self.identity_ttl if ttl is None else ttl,
            now,
        )

    def issue_verification_token(
        self,
        account_id: str | UUID,
        ttl: timedelta | None = None,
        now: datetime | None = None,
    ) -> str:
        """Longer-lived token embedded in the confirmation email link."""
        return self._issue(
            account_id,
            TOKEN_PURPOSE_EMAIL_VERIFICATION,
            self.verification_ttl if ttl is None else ttl,
            now,
        )

    def verify(self, token: str, purpose: str) -> TokenClaims:
        """
        Check signature, expiry and purpose; return the claims.
        Raises InvalidTokenError on any failure.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired.") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e
        if payload.get("purpose") != purpose:
            raise InvalidTokenError("Token was not issued for this purpose.")
        return TokenClaims(
            subject=str(payload["sub"]),
            purpose=purpose,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )
