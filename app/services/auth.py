"""
Authentication state machine: signup, password and Google login, email verification, sessions.

A login attempt moves Unauthenticated -> CredentialCheck and ends in one of:
- SessionEstablished: returns the new AuthSession.
- EmailUnverified: raises EmailUnverifiedError (local account, correct password, email not verified).
- Rejected: raises InvalidCredentialError / UserNotFoundError; nothing is written.

Unknown email and wrong password produce the same message so callers cannot
probe which emails have accounts; the distinction is only logged.
"""

import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.exceptions import (
    ConflictError,
    EmailUnverifiedError,
    InvalidCredentialError,
    InvalidTokenError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from app.core.security import (
    TOKEN_PURPOSE_EMAIL_VERIFICATION,
    TOKEN_PURPOSE_IDENTITY,
    TokenIssuer,
    hash_password,
    verify_password,
)
from app.models import Account, AuthSession
from app.repositories.accounts import AccountRepository
from app.schemas.auth import FederatedProfile
from app.services.sessions import SessionStore

logger = logging.getLogger(__name__)

LOGIN_FAILURE_MESSAGE = "Invalid email or password."


class AuthService:
    """Business rules over accounts, sessions and tokens. Collaborators are injected."""

    def __init__(
        self,
        accounts: AccountRepository,
        sessions: SessionStore,
        tokens: TokenIssuer,
    ) -> None:
        self.accounts = accounts
        self.sessions = sessions
        self.tokens = tokens

    @classmethod
    def from_settings(cls, db: Session, settings: Settings) -> "AuthService":
        return cls(
            accounts=AccountRepository(db),
            sessions=SessionStore(db, ttl=timedelta(seconds=settings.SESSION_TTL_SECONDS)),
            tokens=TokenIssuer.from_settings(settings),
        )

    # Local accounts

    def signup(self, email: str, password: str) -> Account:
        """Create an unverified local account. Raises ConflictError if the email is taken."""
        if self.accounts.get_by_email(email) is not None:
            raise ConflictError("User already exists.")
        account = self.accounts.create(email=email, password_hash=hash_password(password))
        logger.info(
            "Account created",
            extra={"account_id": str(account.id), "auth_method": "password"},
        )
        return account

    def issue_verification_token(self, account: Account) -> str:
        return self.tokens.issue_verification_token(account.id)

    def login(self, email: str, password: str, now: datetime | None = None) -> AuthSession:
        """Check credentials and, if the email is verified, establish a session."""
        account = self.accounts.get_by_email(email)
        if account is None:
            logger.info("Login rejected", extra={"reason": "user_not_found"})
            raise UserNotFoundError(LOGIN_FAILURE_MESSAGE)
        if not verify_password(password, account.password_hash):
            logger.info(
                "Login rejected",
                extra={"reason": "invalid_password", "account_id": str(account.id)},
            )
            raise InvalidCredentialError(LOGIN_FAILURE_MESSAGE)
        if not account.is_email_verified:
            logger.info(
                "Login blocked until email is verified",
                extra={"account_id": str(account.id)},
            )
            raise EmailUnverifiedError(account, self.issue_verification_token(account))
        return self.establish_session(account, now)

    def establish_session(self, account: Account, now: datetime | None = None) -> AuthSession:
        """
        Record the login and open a server-side session, in one transaction.

        Order: login_count += 1, last_active_at = now, audit row, session row.
        """
        now = now or datetime.now(UTC)
        self.accounts.record_login(account, now)
        session = self.sessions.create(account.id, now=now, commit=False)
        self.accounts.commit()
        logger.info("Session established", extra={"account_id": str(account.id)})
        return session

    # Federated accounts

    def federated_login(
        self, profile: FederatedProfile, now: datetime | None = None
    ) -> tuple[Account, AuthSession]:
        """
        Log in with a Google profile, provisioning the account on first sight.

        An existing local account with the same email is linked only when the
        provider reports the email as verified.
        """
        account = self.accounts.get_by_google_id(profile.provider_id)
        if account is None:
            existing = self.accounts.get_by_email(profile.email)
            if existing is not None:
                if not profile.email_verified or existing.google_id is not None:
                    raise ConflictError("An account with this email already exists.")
                existing.google_id = profile.provider_id
                existing.is_email_verified = True
                if not existing.name and profile.name:
                    existing.name = profile.name
                account = self.accounts.save(existing)
                logger.info("Linked Google identity", extra={"account_id": str(account.id)})
            else:
                account = self.accounts.create(
                    email=profile.email,
                    google_id=profile.provider_id,
                    name=profile.name,
                    is_email_verified=True,
                )
                logger.info(
                    "Account created",
                    extra={"account_id": str(account.id), "auth_method": "google"},
                )
        return account, self.establish_session(account, now)

    def issue_identity_token(self, account: Account) -> str:
        return self.tokens.issue_identity_token(account.id)

    # Tokens

    def complete_email_verification(
        self,
        token: str,
        current_account: Account | None = None,
        now: datetime | None = None,
    ) -> AuthSession | None:
        """
        Mark the token's account verified.

        A session is opened only on the unverified -> verified transition and only
        for an anonymous caller. Replaying a token for an already verified account
        succeeds without side effects, so login stats are never counted twice.
        """
        claims = self.tokens.verify(token, TOKEN_PURPOSE_EMAIL_VERIFICATION)
        account = self._get_or_404(claims.account_id)
        if account.is_email_verified:
            logger.info("Email already verified", extra={"account_id": str(account.id)})
            return None
        account.is_email_verified = True
        logger.info("Email verified", extra={"account_id": str(account.id)})
        if current_account is not None:
            self.accounts.save(account)
            return None
        return self.establish_session(account, now)

    def resume_session(self, token: str, now: datetime | None = None) -> AuthSession:
        """Trade an identity token for a session. The login it came from was already counted."""
        claims = self.tokens.verify(token, TOKEN_PURPOSE_IDENTITY)
        account = self._get_or_404(claims.account_id)
        if not account.is_email_verified:
            raise EmailUnverifiedError(account, self.issue_verification_token(account))
        return self.sessions.create(account.id, now=now)

    def redeem_token(
        self,
        token: str,
        current_account: Account | None = None,
        now: datetime | None = None,
    ) -> AuthSession | None:
        """Accept either a verification token or an identity token."""
        try:
            return self.complete_email_verification(token, current_account, now)
        except InvalidTokenError as first_error:
            try:
                return self.resume_session(token, now)
            except InvalidTokenError:
                raise first_error from None

    def logout(self, session_id: str | None) -> bool:
        """End the session. Accounts are not touched."""
        return self.sessions.delete(session_id)

    # Profile

    def get_account(self, account_id: UUID) -> Account:
        return self._get_or_404(account_id)

    def list_accounts(self) -> list[Account]:
        return self.accounts.list_all()

    def update_display_name(self, account: Account, name: str) -> Account:
        account.name = name
        return self.accounts.save(account)

    def change_password(self, account: Account, current_password: str, new_password: str) -> None:
        """Replace the password hash after checking the current password."""
        if account.password_hash is None:
            raise ValidationError("Cannot update password for Google accounts.")
        if not verify_password(current_password, account.password_hash):
            raise ValidationError("Incorrect password.")
        account.password_hash = hash_password(new_password)
        self.accounts.save(account)
        logger.info("Password changed", extra={"account_id": str(account.id)})

    def _get_or_404(self, account_id: UUID) -> Account:
        account = self.accounts.get_by_id(account_id)
        if account is None:
            raise NotFoundError("User not found.")
        return account
