"""ORM model for server-side sessions keyed by the session cookie value."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid

from app.models.base import Base


class AuthSession(Base):
    """
    Authenticated browser context. The primary key is the opaque cookie value.

    Valid while expires_at is in the future; removed on logout.
    """

    __tablename__ = "auth_sessions"

    id = Column(String(64), primary_key=True)
    account_id = Column(
        Uuid,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
