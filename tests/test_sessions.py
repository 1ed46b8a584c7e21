"""Unit tests for app.services.sessions: server-side session lifecycle and purge."""

import unittest
from datetime import UTC, datetime, timedelta

from support import add_local_account, make_sessionmaker

from app.models import AuthSession
from app.services.sessions import SessionStore


class TestSessionStore(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_sessionmaker()()
        self.store = SessionStore(self.db, ttl=timedelta(hours=1))
        self.account = add_local_account(self.db)

    def tearDown(self) -> None:
        self.db.close()

    def test_create_sets_fixed_lifetime_and_opaque_id(self) -> None:
        now = datetime.now(UTC)
        session = self.store.create(self.account.id, now=now)
        self.assertGreaterEqual(len(session.id), 40)
        self.assertEqual(session.expires_at - session.created_at, timedelta(hours=1))
        other = self.store.create(self.account.id, now=now)
        self.assertNotEqual(session.id, other.id)

    def test_get_active_returns_live_session(self) -> None:
        session = self.store.create(self.account.id)
        found = self.store.get_active(session.id)
        self.assertIsNotNone(found)
        self.assertEqual(found.account_id, self.account.id)

    def test_get_active_ignores_expired_and_unknown(self) -> None:
        session = self.store.create(self.account.id, now=datetime.now(UTC) - timedelta(hours=2))
        self.assertIsNone(self.store.get_active(session.id))
        self.assertIsNone(self.store.get_active("unknown"))
        self.assertIsNone(self.store.get_active(None))

    def test_delete(self) -> None:
        session_id = self.store.create(self.account.id).id
        self.assertTrue(self.store.delete(session_id))
        self.assertIsNone(self.store.get_active(session_id))
        self.assertFalse(self.store.delete(session_id))
        self.assertFalse(self.store.delete(None))

    def test_purge_expired_keeps_live_sessions(self) -> None:
        now = datetime.now(UTC)
        self.store.create(self.account.id, now=now - timedelta(hours=3))
        self.store.create(self.account.id, now=now - timedelta(hours=2))
        live = self.store.create(self.account.id, now=now)
        self.assertEqual(self.store.purge_expired(now=now), 2)
        remaining = self.db.query(AuthSession).all()
        self.assertEqual([s.id for s in remaining], [live.id])
        self.assertEqual(self.store.purge_expired(now=now), 0)


if __name__ == "__main__":
    unittest.main()
