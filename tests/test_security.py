"""Unit tests for app.core.security: bcrypt password hashing and the token issuer."""

import unittest
import uuid
from datetime import UTC, datetime, timedelta

from app.core.exceptions import InvalidTokenError
from app.core.security import (
    BCRYPT_ROUNDS,
    TOKEN_PURPOSE_EMAIL_VERIFICATION,
    TOKEN_PURPOSE_IDENTITY,
    TokenIssuer,
    hash_password,
    verify_password,
)


class TestPasswordHashing(unittest.TestCase):
    """hash_password/verify_password round trip and rejection."""

    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        for password in ("Password!23", "ünïcødé-Pässwörd1!", "x" * 100):
            hashed = hash_password(password)
            self.assertNotEqual(hashed, password)
            self.assertTrue(verify_password(password, hashed))

    def test_wrong_password_does_not_verify(self) -> None:
        hashed = hash_password("Password!23")
        self.assertFalse(verify_password("Password!24", hashed))
        self.assertFalse(verify_password("", hashed))

    def test_same_password_hashes_differently(self) -> None:
        self.assertNotEqual(hash_password("Password!23"), hash_password("Password!23"))

    def test_uses_fixed_cost(self) -> None:
        self.assertTrue(hash_password("Password!23").startswith(f"$2b${BCRYPT_ROUNDS:02d}$"))

    def test_missing_or_malformed_hash_is_false_not_error(self) -> None:
        self.assertFalse(verify_password("Password!23", None))
        self.assertFalse(verify_password("Password!23", ""))
        self.assertFalse(verify_password("Password!23", "not-a-bcrypt-hash"))


class TestTokenIssuer(unittest.TestCase):
    """Signed tokens verify before expiry and fail after, with purpose separation."""

    def setUp(self) -> None:
        self.issuer = TokenIssuer("secret-one")
        self.account_id = uuid.uuid4()

    def test_identity_token_round_trip(self) -> None:
        token = self.issuer.issue_identity_token(self.account_id)
        claims = self.issuer.verify(token, TOKEN_PURPOSE_IDENTITY)
        self.assertEqual(claims.account_id, self.account_id)
        self.assertEqual(claims.purpose, TOKEN_PURPOSE_IDENTITY)
        self.assertGreater(claims.expires_at, claims.issued_at)

    def test_verification_token_uses_longer_default_ttl(self) -> None:
        now = datetime.now(UTC)
        token = self.issuer.issue_verification_token(self.account_id, now=now)
        claims = self.issuer.verify(token, TOKEN_PURPOSE_EMAIL_VERIFICATION)
        self.assertEqual(
            int((claims.expires_at - claims.issued_at).total_seconds()),
            int(timedelta(hours=24).total_seconds()),
        )

    def test_valid_before_ttl_elapses(self) -> None:
        issued = datetime.now(UTC) - timedelta(minutes=30)
        token = self.issuer.issue_verification_token(
            self.account_id, ttl=timedelta(hours=1), now=issued
        )
        self.issuer.verify(token, TOKEN_PURPOSE_EMAIL_VERIFICATION)

    def test_invalid_after_ttl_elapses(self) -> None:
        issued = datetime.now(UTC) - timedelta(hours=2)
        token = self.issuer.issue_verification_token(
            self.account_id, ttl=timedelta(hours=1), now=issued
        )
        with self.assertRaises(InvalidTokenError) as ctx:
            self.issuer.verify(token, TOKEN_PURPOSE_EMAIL_VERIFICATION)
        self.assertIn("expired", ctx.exception.message)

    def test_wrong_purpose_rejected(self) -> None:
        token = self.issuer.issue_identity_token(self.account_id)
        with self.assertRaises(InvalidTokenError):
            self.issuer.verify(token, TOKEN_PURPOSE_EMAIL_VERIFICATION)

    def test_other_secret_rejected(self) -> None:
        token = TokenIssuer("secret-two").issue_identity_token(self.account_id)
        with self.assertRaises(InvalidTokenError):
            self.issuer.verify(token, TOKEN_PURPOSE_IDENTITY)

    def test_garbage_and_empty_rejected(self) -> None:
        for token in ("", "abc", "a.b.c"):
            with self.assertRaises(InvalidTokenError):
                self.issuer.verify(token, TOKEN_PURPOSE_IDENTITY)

    def test_non_positive_ttl_refused(self) -> None:
        for ttl in (timedelta(0), timedelta(seconds=-1)):
            with self.subTest(ttl=ttl):
                with self.assertRaises(ValueError):
                    self.issuer.issue_identity_token(self.account_id, ttl=ttl)
                with self.assertRaises(ValueError):
                    self.issuer.issue_verification_token(self.account_id, ttl=ttl)

    def test_explicit_ttl_is_not_replaced_by_default(self) -> None:
        now = datetime.now(UTC)
        token = self.issuer.issue_verification_token(
            self.account_id, ttl=timedelta(seconds=5), now=now
        )
        claims = self.issuer.verify(token, TOKEN_PURPOSE_EMAIL_VERIFICATION)
        self.assertEqual(claims.expires_at - claims.issued_at, timedelta(seconds=5))

    def test_non_uuid_subject_is_invalid_token(self) -> None:
        token = self.issuer.issue_identity_token("someone@userbase.io")
        claims = self.issuer.verify(token, TOKEN_PURPOSE_IDENTITY)
        with self.assertRaises(InvalidTokenError):
            _ = claims.account_id

    def test_empty_secret_refused(self) -> None:
        with self.assertRaises(ValueError):
            TokenIssuer("")


if __name__ == "__main__":
    unittest.main()
