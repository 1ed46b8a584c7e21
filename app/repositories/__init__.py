"""Store interfaces over the relational account store."""

from app.repositories.accounts import AccountRepository

__all__ = ["AccountRepository"]
