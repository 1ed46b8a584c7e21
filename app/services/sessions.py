"""Server-side session store: create, look up, delete and purge cookie-keyed sessions."""

import logging
import secrets
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from app.models import AuthSession

logger = logging.getLogger(__name__)

# 32 random bytes -> 43 url-safe characters; fits the 64-char primary key.
SESSION_ID_BYTES = 32


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything written here is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SessionStore:
    """Sessions live in the auth_sessions table and expire after a fixed lifetime."""

    def __init__(self, db: Session, ttl: timedelta) -> None:
        self.db = db
        self.ttl = ttl

    def create(self, account_id: UUID, now: datetime | None = None, commit: bool = True) -> AuthSession:
        now = now or datetime.now(UTC)
        session = AuthSession(
            id=secrets.token_urlsafe(SESSION_ID_BYTES),
            account_id=account_id,
            created_at=now,
            expires_at=now + self.ttl,
        )
        self.db.add(session)
        if commit:
            self.db.commit()
        return session

    def get_active(self, session_id: str | None, now: datetime | None = None) -> AuthSession | None:
        """Return the session if it exists and has not expired."""
        if not session_id:
            return None
        session = self.db.query(AuthSession).filter(AuthSession.id == session_id).first()
        if session is None:
            return None
        now = now or datetime.now(UTC)
        if _as_utc(session.expires_at) <= now:
            return None
        return session

    def delete(self, session_id: str | None) -> bool:
        """Delete one session. Returns False if it did not exist."""
        if not session_id:
            return False
        deleted = (
            self.db.query(AuthSession)
            .filter(AuthSession.id == session_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted > 0

    def purge_expired(self, now: datetime | None = None) -> int:
        """Delete every expired session. Idempotent; returns the number of rows removed."""
        now = now or datetime.now(UTC)
        deleted = (
            self.db.query(AuthSession)
            .filter(AuthSession.expires_at <= now)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted > 0:
            logger.info("Purged expired sessions: cutoff=%s, sessions_deleted=%s", now.isoformat(), deleted)
        return deleted
