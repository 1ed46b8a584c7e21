"""SQLAlchemy ORM models."""

from app.models.account import Account
from app.models.auth_session import AuthSession
from app.models.base import Base
from app.models.session_log import SessionLog

__all__ = ["Account", "AuthSession", "Base", "SessionLog"]
