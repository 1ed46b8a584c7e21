"""Account store: lookups and writes over accounts and the login audit log."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError
from app.models import Account, SessionLog

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Emails are compared and stored trimmed and lower-cased."""
    return email.strip().lower()


class AccountRepository:
    """Thin wrapper around a SQLAlchemy session; the only place that queries accounts."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_id(self, account_id: UUID) -> Account | None:
        return self.db.query(Account).filter(Account.id == account_id).first()

    def get_by_email(self, email: str) -> Account | None:
        return (
            self.db.query(Account)
            .filter(Account.email == normalize_email(email))
            .first()
        )

    def get_by_google_id(self, google_id: str) -> Account | None:
        return self.db.query(Account).filter(Account.google_id == google_id).first()

    def list_all(self) -> list[Account]:
        return self.db.query(Account).order_by(Account.created_at, Account.email).all()

    def create(
        self,
        email: str,
        password_hash: str | None = None,
        google_id: str | None = None,
        name: str | None = None,
        is_email_verified: bool = False,
    ) -> Account:
        """
        Insert a new account and commit.

        Email uniqueness is enforced by the unique index; a concurrent duplicate
        surfaces here as IntegrityError and is raised as ConflictError.
        """
        if password_hash is None and google_id is None:
            raise ValueError("An account needs a password hash or a federated id")
        account = Account(
            email=normalize_email(email),
            password_hash=password_hash,
            google_id=google_id,
            name=name,
            is_email_verified=is_email_verified,
            login_count=0,
        )
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info("Account insert rejected by unique constraint: %s", e.orig)
            raise ConflictError("User already exists.") from e
        self.db.refresh(account)
        return account

    def record_login(self, account: Account, now: datetime) -> SessionLog:
        """
        Bump login stats and append an audit row. Caller commits.

        login_count is incremented in SQL so concurrent logins do not overwrite each other.
        """
        account.login_count = Account.login_count + 1
        account.last_active_at = now
        entry = SessionLog(account_id=account.id, login_time=now)
        self.db.add(entry)
        return entry

    def save(self, account: Account) -> Account:
        self.db.add(account)
        self.db.commit()
        self.db.refresh(account)
        return account

    def commit(self) -> None:
        self.db.commit()
