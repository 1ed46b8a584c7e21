"""Google OAuth 2.0 (authorization code flow): authorization URL, code exchange, userinfo."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from app.schemas.auth import FederatedProfile

if TYPE_CHECKING:
    from app.core.config import Settings

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = ("openid", "email", "profile")


class GoogleOAuthNotConfiguredError(Exception):
    """Raised when Google login is used but client id/secret are missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class GoogleOAuthError(Exception):
    """Raised when Google rejects the code exchange or returns an unusable profile."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def is_google_configured(settings: Settings) -> bool:
    if not settings.GOOGLE_CLIENT_ID or not settings.GOOGLE_CLIENT_ID.strip():
        return False
    if settings.GOOGLE_CLIENT_SECRET is None:
        return False
    return bool(settings.GOOGLE_CLIENT_SECRET.get_secret_value().strip())


def _require_configured(settings: Settings) -> None:
    if not is_google_configured(settings):
        raise GoogleOAuthNotConfiguredError(
            "Google login is not configured; set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
        )


def build_authorization_url(settings: Settings, state: str) -> str:
    """URL to redirect the browser to; Google sends it back to GOOGLE_REDIRECT_URI with code and state."""
    _require_configured(settings)
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID.strip(),
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(GOOGLE_SCOPES),
        "state": state,
        "access_type": "online",
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"


def _error_detail(resp: httpx.Response) -> str:
    try:
        body: dict[str, Any] = resp.json()
        return str(body.get("error_description") or body.get("error") or body)[:500]
    except ValueError:
        return resp.text[:500] if resp.text else "Unknown error"


async def fetch_google_profile(settings: Settings, code: str) -> FederatedProfile:
    """
    Exchange an authorization code for an access token and fetch the user's profile.

    Raises GoogleOAuthNotConfiguredError or GoogleOAuthError.
    """
    _require_configured(settings)
    if not code:
        raise GoogleOAuthError("Missing authorization code.", 400)
    timeout = settings.GOOGLE_REQUEST_TIMEOUT_SEC

    async with httpx.AsyncClient() as client:
        try:
            token_resp = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": settings.GOOGLE_CLIENT_ID.strip(),
                    "client_secret": settings.GOOGLE_CLIENT_SECRET.get_secret_value(),
                    "redirect_uri": settings.GOOGLE_REDIRECT_URI,
                    "grant_type": "authorization_code",
                },
                headers={"Accept": "application/json"},
                timeout=timeout,
            )
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"Google token endpoint unreachable: {e!s}") from e
        if token_resp.status_code >= 400:
            raise GoogleOAuthError(
                f"Google returned {token_resp.status_code}: {_error_detail(token_resp)}",
                token_resp.status_code,
            )
        access_token = token_resp.json().get("access_token")
        if not access_token:
            raise GoogleOAuthError("Google token response missing access_token.")

        try:
            userinfo_resp = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=timeout,
            )
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"Google userinfo endpoint unreachable: {e!s}") from e
        if userinfo_resp.status_code >= 400:
            raise GoogleOAuthError(
                f"Google returned {userinfo_resp.status_code}: {_error_detail(userinfo_resp)}",
                userinfo_resp.status_code,
            )
        try:
            return FederatedProfile.model_validate(userinfo_resp.json())
        except ValidationError as e:
            raise GoogleOAuthError("Google profile is missing a subject or email.") from e
