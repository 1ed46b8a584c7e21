"""Request-scoped dependencies: auth service wiring, session cookie, request context."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Response
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings, settings
from app.core.database import get_db
from app.core.exceptions import NotAuthenticatedError
from app.models import Account, AuthSession
from app.services.auth import AuthService

session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    return AuthService.from_settings(db, app_settings)


@dataclass(frozen=True)
class RequestContext:
    """Who is calling: the live session (if any) and its account."""

    session: AuthSession | None = None
    account: Account | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.account is not None

    @property
    def session_id(self) -> str | None:
        return self.session.id if self.session is not None else None


def get_request_context(
    session_id: Annotated[str | None, Depends(session_cookie)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> RequestContext:
    """Resolve the session cookie; anonymous context when missing, unknown or expired."""
    session = service.sessions.get_active(session_id)
    if session is None:
        return RequestContext()
    account = service.accounts.get_by_id(session.account_id)
    if account is None:
        return RequestContext()
    return RequestContext(session=session, account=account)


def require_account(
    context: Annotated[RequestContext, Depends(get_request_context)],
) -> Account:
    """Dependency: require a logged-in session. Raises 401 otherwise."""
    if context.account is None:
        raise NotAuthenticatedError("Not authenticated")
    return context.account


def set_session_cookie(response: Response, session: AuthSession, app_settings: Settings) -> None:
    response.set_cookie(
        key=app_settings.SESSION_COOKIE_NAME,
        value=session.id,
        max_age=app_settings.SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=app_settings.session_cookie_secure,
        path="/",
    )


def clear_session_cookie(response: Response, app_settings: Settings) -> None:
    response.delete_cookie(
        key=app_settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=app_settings.session_cookie_secure,
        path="/",
    )
