"""ORM model for user accounts (local email/password and federated Google)."""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    String,
    Uuid,
    func,
)

from app.core.security import EMAIL_MAX_LEN
from app.models.base import Base


class Account(Base):
    """
    User account.

    Local accounts carry password_hash and must verify their email before a
    session is allowed; federated accounts carry google_id and start verified.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            "password_hash IS NOT NULL OR google_id IS NOT NULL",
            name="ck_accounts_has_credential",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(EMAIL_MAX_LEN), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    google_id = Column(String(255), nullable=True, unique=True, index=True)
    name = Column(String(255), nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    login_count = Column(Integer, nullable=False, default=0)
    last_active_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r}>"
