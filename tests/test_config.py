"""Unit tests for app.core.config.Settings validation."""

import unittest

from pydantic import ValidationError

from app.core.config import Settings


def _settings(**values: object) -> Settings:
    return Settings(_env_file=None, **values)


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        s = _settings()
        self.assertEqual(s.API_V1_PREFIX, "")
        self.assertEqual(s.SESSION_COOKIE_NAME, "sid")
        self.assertEqual(s.IDENTITY_TOKEN_TTL_SECONDS, 60)
        self.assertEqual(s.VERIFICATION_TOKEN_TTL_HOURS, 24)
        self.assertFalse(s.session_cookie_secure)

    def test_prod_uses_secure_cookies(self) -> None:
        self.assertTrue(_settings(APP_ENV="prod").session_cookie_secure)

    def test_rejects_non_postgres_database_url(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DATABASE_URL="sqlite:///x.db")

    def test_rejects_asymmetric_jwt_algorithm(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_ALGORITHM="RS256")

    def test_rejects_empty_jwt_secret(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_SECRET=" ")

    def test_ttl_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(IDENTITY_TOKEN_TTL_SECONDS=0)
        with self.assertRaises(ValidationError):
            _settings(SESSION_TTL_SECONDS=30)
        with self.assertRaises(ValidationError):
            _settings(VERIFICATION_TOKEN_TTL_HOURS=200)

    def test_urls_normalized(self) -> None:
        s = _settings(BASE_URL="https://api.userbase.io/", API_V1_PREFIX="/api/v1/")
        self.assertEqual(s.BASE_URL, "https://api.userbase.io")
        self.assertEqual(s.API_V1_PREFIX, "/api/v1")
        with self.assertRaises(ValidationError):
            _settings(HOME_PAGE_URL="ftp://files")
        with self.assertRaises(ValidationError):
            _settings(API_V1_PREFIX="api")

    def test_blank_smtp_host_means_disabled(self) -> None:
        self.assertIsNone(_settings(SMTP_HOST="  ").SMTP_HOST)


if __name__ == "__main__":
    unittest.main()
