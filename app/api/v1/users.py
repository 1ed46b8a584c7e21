"""User endpoints: profile, display name, password change, statistics, user list. Session required."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.deps import get_auth_service, require_account
from app.core.database import get_db
from app.models import Account
from app.schemas.auth import MessageResponse
from app.schemas.users import (
    ChangePasswordRequest,
    ProfileResponse,
    UpdateNameRequest,
    UserListItem,
    UserStatsResponse,
)
from app.services.auth import AuthService
from app.services.stats import get_user_stats

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    account: Annotated[Account, Depends(require_account)],
) -> ProfileResponse:
    return ProfileResponse(name=account.name, email=account.email)


@router.post("/name", response_model=ProfileResponse)
def update_name(
    body: UpdateNameRequest,
    account: Annotated[Account, Depends(require_account)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> ProfileResponse:
    updated = service.update_display_name(account, body.name)
    return ProfileResponse(name=updated.name, email=updated.email)


@router.post("/password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    account: Annotated[Account, Depends(require_account)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Change the password of a local account. Google-only accounts get 400."""
    service.change_password(account, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get("/stats", response_model=UserStatsResponse)
def get_stats(
    db: Annotated[Session, Depends(get_db)],
    _account: Annotated[Account, Depends(require_account)],
) -> UserStatsResponse:
    """Total users, users active today, and rolling 7-day average of daily active users."""
    return get_user_stats(db)


@router.get("", response_model=list[UserListItem])
def list_users(
    service: Annotated[AuthService, Depends(get_auth_service)],
    _account: Annotated[Account, Depends(require_account)],
) -> list[UserListItem]:
    return [UserListItem.model_validate(a) for a in service.list_accounts()]
