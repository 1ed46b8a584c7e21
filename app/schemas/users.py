"""Request/response schemas for /users endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.security import PASSWORD_MAX_LEN
from app.schemas.auth import validate_password_strength

NAME_MAX_LENGTH = 50


class ProfileResponse(BaseModel):
    """Public profile of the signed-in account."""

    name: str | None = None
    email: str


class UpdateNameRequest(BaseModel):
    name: str = Field(..., description="New display name")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"Name must not exceed {NAME_MAX_LENGTH} characters")
        return v


class ChangePasswordRequest(BaseModel):
    """Current password plus the new one, twice."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(
        ..., alias="currentPassword", min_length=1, max_length=PASSWORD_MAX_LEN
    )
    new_password: str = Field(..., alias="newPassword")
    new_password_confirmation: str = Field(..., alias="newPasswordConfirmation")

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode="after")
    def check_passwords(self) -> "ChangePasswordRequest":
        if self.new_password == self.current_password:
            raise ValueError("New password cannot be the same as the current password")
        if self.new_password != self.new_password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class UserListItem(BaseModel):
    """Account entry for the user list (no credentials)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str
    login_count: int = Field(..., serialization_alias="loginCount")
    last_active_at: datetime | None = Field(default=None, serialization_alias="lastActiveSession")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")


class UserStatsResponse(BaseModel):
    """Aggregate user counts."""

    total_users: int = Field(..., ge=0, serialization_alias="totalUsers")
    active_users_today: int = Field(..., ge=0, serialization_alias="activeUserTodayCount")
    rolling_7_day_avg_active_users: int = Field(
        ...,
        ge=0,
        serialization_alias="rolling7DayAvgActiveUserCount",
        description="Distinct accounts with a login in the last 7 days, divided by 7, rounded up",
    )
