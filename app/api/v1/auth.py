"""Auth endpoints: signup, login/logout, token verification, Google OAuth."""

import logging
import secrets
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.background import BackgroundTask

from app.api.v1.deps import (
    RequestContext,
    clear_session_cookie,
    get_auth_service,
    get_request_context,
    set_session_cookie,
)
from app.core.config import Settings, get_settings
from app.core.exceptions import ConflictError, EmailUnverifiedError
from app.schemas.auth import (
    AccountResponse,
    LoginRequest,
    MessageResponse,
    SignupRequest,
    TokenRequest,
)
from app.services.auth import AuthService
from app.services.google_oauth import (
    GoogleOAuthError,
    GoogleOAuthNotConfiguredError,
    build_authorization_url,
    fetch_google_profile,
)
from app.services.mailer import send_confirmation_email

logger = logging.getLogger(__name__)
router = APIRouter()

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 600


def _redirect_with_params(url: str, **params: str) -> RedirectResponse:
    separator = "&" if "?" in url else "?"
    return RedirectResponse(
        f"{url}{separator}{urlencode(params)}" if params else url,
        status_code=status.HTTP_302_FOUND,
    )


def _google_login_failed(app_settings: Settings, error: str) -> RedirectResponse:
    redirect = _redirect_with_params(app_settings.LOGIN_PAGE_URL, error=error)
    redirect.delete_cookie(OAUTH_STATE_COOKIE)
    return redirect


@router.post("/signup", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    background_tasks: BackgroundTasks,
    service: Annotated[AuthService, Depends(get_auth_service)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> AccountResponse:
    """
    Create a local account and email a confirmation link.
    The account cannot log in until the link (or POST /auth/token) is used.
    """
    account = service.signup(body.email, body.password)
    token = service.issue_verification_token(account)
    background_tasks.add_task(send_confirmation_email, app_settings, account.email, token)
    return AccountResponse.model_validate(account)


@router.post(
    "/login",
    response_model=MessageResponse,
    responses={401: {"description": "Invalid credentials"}, 403: {"description": "Email not verified"}},
)
def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse | JSONResponse:
    """Log in with email and password; sets the session cookie."""
    try:
        session = service.login(body.email, body.password)
    except EmailUnverifiedError as e:
        # The fresh token is only delivered by email; the 403 body does not carry it.
        return JSONResponse(
            status_code=e.status_code,
            content={"detail": e.message},
            background=BackgroundTask(
                send_confirmation_email, app_settings, e.account.email, e.verification_token
            ),
        )
    set_session_cookie(response, session, app_settings)
    return MessageResponse(message="Login successful")


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    context: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """End the current session (if any) and clear the cookie."""
    if context.is_authenticated:
        service.logout(context.session_id)
    clear_session_cookie(response, app_settings)
    return MessageResponse(message="Logged out successfully")


@router.post("/token", response_model=MessageResponse)
def verify_token(
    body: TokenRequest,
    response: Response,
    context: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> MessageResponse:
    """
    Redeem an email-verification token (marks the email verified) or an
    identity token from the Google callback. Opens a session for anonymous callers.
    """
    session = service.redeem_token(body.token, current_account=context.account)
    if session is not None:
        # The caller keeps a single live session.
        if context.session_id is not None:
            service.logout(context.session_id)
        set_session_cookie(response, session, app_settings)
    return MessageResponse(message="Token verified!")


@router.get("/confirm-email/{token}", response_class=RedirectResponse)
def confirm_email(
    token: str,
    context: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> RedirectResponse:
    """Link target of the confirmation email. Verifies, then redirects to the home page."""
    session = service.complete_email_verification(token, current_account=context.account)
    redirect = RedirectResponse(app_settings.HOME_PAGE_URL, status_code=status.HTTP_303_SEE_OTHER)
    if session is not None:
        set_session_cookie(redirect, session, app_settings)
    return redirect


@router.get("/google", response_class=RedirectResponse)
def google_login(
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> RedirectResponse:
    """Redirect to Google's consent page."""
    state = secrets.token_urlsafe(24)
    try:
        url = build_authorization_url(app_settings, state)
    except GoogleOAuthNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
    redirect = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    redirect.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=app_settings.session_cookie_secure,
    )
    return redirect


@router.get("/google/callback", response_class=RedirectResponse)
async def google_callback(
    request: Request,
    service: Annotated[AuthService, Depends(get_auth_service)],
    app_settings: Annotated[Settings, Depends(get_settings)],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """
    Google redirects here. On success: session cookie plus a redirect to the home
    page carrying a short-lived identity token. On any failure: login page.
    """
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if error or not code:
        logger.info("Google login cancelled or denied", extra={"reason": (error or "missing_code")[:200]})
        return _google_login_failed(app_settings, "google_auth_failed")
    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Google callback state mismatch")
        return _google_login_failed(app_settings, "google_auth_failed")

    try:
        profile = await fetch_google_profile(app_settings, code)
    except GoogleOAuthNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
    except GoogleOAuthError as e:
        logger.error(
            "Google login failed",
            extra={"reason": (e.message or str(e))[:500], "provider_status": e.status_code},
        )
        return _google_login_failed(app_settings, "google_auth_failed")

    try:
        account, session = service.federated_login(profile)
    except ConflictError as e:
        logger.info("Google login conflicts with an existing account", extra={"reason": e.message})
        return _google_login_failed(app_settings, "account_exists")

    redirect = _redirect_with_params(
        app_settings.HOME_PAGE_URL, token=service.issue_identity_token(account)
    )
    set_session_cookie(redirect, session, app_settings)
    redirect.delete_cookie(OAUTH_STATE_COOKIE)
    return redirect
