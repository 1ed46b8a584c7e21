"""Unit tests for app.services.google_oauth: configuration, authorization URL, code exchange."""

import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import parse_qs, urlparse

import httpx

from app.core.config import Settings
from app.services.google_oauth import (
    GOOGLE_AUTHORIZE_URL,
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
    GoogleOAuthError,
    GoogleOAuthNotConfiguredError,
    build_authorization_url,
    fetch_google_profile,
    is_google_configured,
)


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "GOOGLE_CLIENT_ID": "client-id",
        "GOOGLE_CLIENT_SECRET": "client-secret",
        "GOOGLE_REDIRECT_URI": "http://localhost:8000/auth/google/callback",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _response(status_code: int, body: dict) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    resp.text = str(body)
    return resp


class TestIsGoogleConfigured(unittest.TestCase):
    def test_configured(self) -> None:
        self.assertTrue(is_google_configured(_settings()))

    def test_missing_client_id(self) -> None:
        self.assertFalse(is_google_configured(_settings(GOOGLE_CLIENT_ID=None)))
        self.assertFalse(is_google_configured(_settings(GOOGLE_CLIENT_ID="  ")))

    def test_missing_secret(self) -> None:
        self.assertFalse(is_google_configured(_settings(GOOGLE_CLIENT_SECRET=None)))
        self.assertFalse(is_google_configured(_settings(GOOGLE_CLIENT_SECRET="")))


class TestBuildAuthorizationUrl(unittest.TestCase):
    def test_carries_client_redirect_scope_and_state(self) -> None:
        url = build_authorization_url(_settings(), "state-123")
        self.assertTrue(url.startswith(GOOGLE_AUTHORIZE_URL + "?"))
        params = parse_qs(urlparse(url).query)
        self.assertEqual(params["client_id"], ["client-id"])
        self.assertEqual(params["redirect_uri"], ["http://localhost:8000/auth/google/callback"])
        self.assertEqual(params["response_type"], ["code"])
        self.assertEqual(params["state"], ["state-123"])
        self.assertEqual(params["scope"], ["openid email profile"])

    def test_not_configured(self) -> None:
        with self.assertRaises(GoogleOAuthNotConfiguredError):
            build_authorization_url(_settings(GOOGLE_CLIENT_ID=None), "s")


class TestFetchGoogleProfile(unittest.TestCase):
    """Code exchange then userinfo, with httpx.AsyncClient mocked."""

    def _client(self, mock_client_class: MagicMock, post: AsyncMock, get: AsyncMock) -> MagicMock:
        mock_instance = MagicMock()
        mock_instance.post = post
        mock_instance.get = get
        mock_client_class.return_value.__aenter__ = AsyncMock(return_value=mock_instance)
        mock_client_class.return_value.__aexit__ = AsyncMock(return_value=None)
        return mock_instance

    @patch("app.services.google_oauth.httpx.AsyncClient")
    def test_exchanges_code_and_returns_profile(self, mock_client_class: MagicMock) -> None:
        post = AsyncMock(return_value=_response(200, {"access_token": "at-1"}))
        get = AsyncMock(
            return_value=_response(
                200,
                {
                    "sub": "1087",
                    "email": "gina@userbase.io",
                    "email_verified": True,
                    "name": "Gina",
                    "picture": "https://example.invalid/p.png",
                },
            )
        )
        self._client(mock_client_class, post, get)

        profile = asyncio.run(fetch_google_profile(_settings(), "code-xyz"))

        self.assertEqual(profile.provider_id, "1087")
        self.assertEqual(profile.email, "gina@userbase.io")
        self.assertTrue(profile.email_verified)
        self.assertEqual(profile.name, "Gina")

        self.assertEqual(post.call_args[0][0], GOOGLE_TOKEN_URL)
        form = post.call_args[1]["data"]
        self.assertEqual(form["code"], "code-xyz")
        self.assertEqual(form["client_secret"], "client-secret")
        self.assertEqual(form["grant_type"], "authorization_code")
        self.assertEqual(get.call_args[0][0], GOOGLE_USERINFO_URL)
        self.assertEqual(get.call_args[1]["headers"]["Authorization"], "Bearer at-1")

    @patch("app.services.google_oauth.httpx.AsyncClient")
    def test_token_endpoint_error(self, mock_client_class: MagicMock) -> None:
        post = AsyncMock(return_value=_response(400, {"error": "invalid_grant"}))
        get = AsyncMock()
        self._client(mock_client_class, post, get)

        with self.assertRaises(GoogleOAuthError) as ctx:
            asyncio.run(fetch_google_profile(_settings(), "bad-code"))
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIn("invalid_grant", ctx.exception.message)
        get.assert_not_called()

    @patch("app.services.google_oauth.httpx.AsyncClient")
    def test_network_error(self, mock_client_class: MagicMock) -> None:
        post = AsyncMock(side_effect=httpx.ConnectError("boom"))
        self._client(mock_client_class, post, AsyncMock())

        with self.assertRaises(GoogleOAuthError) as ctx:
            asyncio.run(fetch_google_profile(_settings(), "code"))
        self.assertIn("unreachable", ctx.exception.message)

    @patch("app.services.google_oauth.httpx.AsyncClient")
    def test_profile_without_email(self, mock_client_class: MagicMock) -> None:
        post = AsyncMock(return_value=_response(200, {"access_token": "at-1"}))
        get = AsyncMock(return_value=_response(200, {"sub": "1087"}))
        self._client(mock_client_class, post, get)

        with self.assertRaises(GoogleOAuthError):
            asyncio.run(fetch_google_profile(_settings(), "code"))

    def test_not_configured(self) -> None:
        with self.assertRaises(GoogleOAuthNotConfiguredError):
            asyncio.run(fetch_google_profile(_settings(GOOGLE_CLIENT_SECRET=None), "code"))


if __name__ == "__main__":
    unittest.main()
