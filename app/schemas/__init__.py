"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AccountResponse,
    FederatedProfile,
    LoginRequest,
    MessageResponse,
    SignupRequest,
    TokenRequest,
)
from app.schemas.health import HealthResponse
from app.schemas.users import (
    ChangePasswordRequest,
    ProfileResponse,
    UpdateNameRequest,
    UserListItem,
    UserStatsResponse,
)

__all__ = [
    "AccountResponse",
    "ChangePasswordRequest",
    "FederatedProfile",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "ProfileResponse",
    "SignupRequest",
    "TokenRequest",
    "UpdateNameRequest",
    "UserListItem",
    "UserStatsResponse",
]
