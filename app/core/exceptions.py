"""Domain errors raised by services and translated to HTTP responses in app.main."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.account import Account


class AppError(Exception):
    """Base for business-rule failures that map to a fixed status code."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input that passed schema validation but not business rules."""

    status_code = 400


class ConflictError(AppError):
    """An account with the same email already exists."""

    status_code = 409


class InvalidCredentialError(AppError):
    """Password did not match (or there is no password to match against)."""

    status_code = 401


class UserNotFoundError(InvalidCredentialError):
    """No account for the given email. Surfaced to callers exactly like a bad password."""


class NotAuthenticatedError(AppError):
    """Request has no valid session."""

    status_code = 401


class EmailUnverifiedError(AppError):
    """
    Correct password on a local account whose email is not verified yet.

    Carries a fresh verification token so the caller can (re)send the confirmation email.
    """

    status_code = 403

    def __init__(self, account: "Account", verification_token: str) -> None:
        self.account = account
        self.verification_token = verification_token
        super().__init__("Email address has not been verified. A new confirmation email has been sent.")


class InvalidTokenError(AppError):
    """Bearer token has a bad signature, is expired, or was issued for another purpose."""

    status_code = 400

    def __init__(self, message: str = "Invalid or expired token.") -> None:
        super().__init__(message)


class NotFoundError(AppError):
    """Referenced resource does not exist."""

    status_code = 404
