"""ORM model for the append-only login audit log used by statistics."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Uuid

from app.models.base import Base


class SessionLog(Base):
    """One row per successful login. Never updated or deleted."""

    __tablename__ = "session_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(
        Uuid,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    login_time = Column(DateTime(timezone=True), nullable=False, index=True)
