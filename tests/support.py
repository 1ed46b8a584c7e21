"""Shared test fixtures: in-memory SQLite account store and a wired AuthService."""

from datetime import timedelta

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import TokenIssuer, hash_password
from app.models import Account, Base
from app.repositories.accounts import AccountRepository
from app.services.auth import AuthService
from app.services.sessions import SessionStore

TEST_SECRET = "test-secret"
STRONG_PASSWORD = "Password!23"


def make_engine() -> Engine:
    """One shared in-memory database per call (StaticPool keeps a single connection)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


def make_sessionmaker(engine: Engine | None = None) -> sessionmaker:
    return sessionmaker(bind=engine or make_engine(), autocommit=False, autoflush=False)


def make_service(db: Session) -> AuthService:
    return AuthService(
        accounts=AccountRepository(db),
        sessions=SessionStore(db, ttl=timedelta(hours=1)),
        tokens=TokenIssuer(TEST_SECRET),
    )


def add_local_account(
    db: Session,
    email: str = "alice@userbase.io",
    password: str = STRONG_PASSWORD,
    verified: bool = True,
    name: str | None = None,
) -> Account:
    return AccountRepository(db).create(
        email=email,
        password_hash=hash_password(password),
        name=name,
        is_email_verified=verified,
    )
