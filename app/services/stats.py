"""User statistics: total accounts, active today, rolling 7-day daily-active average."""

import logging
import math
from datetime import UTC, datetime, time, timedelta

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from app.models import Account, SessionLog
from app.schemas.users import UserStatsResponse

logger = logging.getLogger(__name__)

ROLLING_WINDOW_DAYS = 7


def _local_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Start and end of the server-local calendar day containing now, in UTC."""
    local_now = now.astimezone()
    start = datetime.combine(local_now.date(), time.min, tzinfo=local_now.tzinfo)
    end = start + timedelta(days=1)
    return start.astimezone(UTC), end.astimezone(UTC)


def total_users(db: Session) -> int:
    return db.query(func.count(Account.id)).scalar() or 0


def active_today(db: Session, now: datetime | None = None) -> int:
    """Accounts whose last login falls on the current local calendar day."""
    start, end = _local_day_bounds(now or datetime.now(UTC))
    return (
        db.query(func.count(Account.id))
        .filter(Account.last_active_at >= start, Account.last_active_at < end)
        .scalar()
        or 0
    )


def rolling_7_day_average(db: Session, now: datetime | None = None) -> int:
    """
    Distinct accounts with at least one login in the trailing 7 days, divided by 7, rounded up.

    Counts accounts, not login rows: one account logging in every day is one active user.
    """
    now = now or datetime.now(UTC)
    window_start = now - timedelta(days=ROLLING_WINDOW_DAYS)
    active_accounts = (
        db.query(func.count(distinct(SessionLog.account_id)))
        .filter(SessionLog.login_time >= window_start, SessionLog.login_time <= now)
        .scalar()
        or 0
    )
    return math.ceil(active_accounts / ROLLING_WINDOW_DAYS)


def get_user_stats(db: Session, now: datetime | None = None) -> UserStatsResponse:
    now = now or datetime.now(UTC)
    stats = UserStatsResponse(
        total_users=total_users(db),
        active_users_today=active_today(db, now),
        rolling_7_day_avg_active_users=rolling_7_day_average(db, now),
    )
    logger.debug("Computed user stats: %s", stats.model_dump())
    return stats
