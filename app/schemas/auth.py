"""Request/response schemas for auth endpoints."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN

# Accept camelCase bodies from the existing frontend as well as snake_case.
_ALIASED = ConfigDict(populate_by_name=True)

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>+-='
_SPECIAL_RE = re.compile(f"[{re.escape(SPECIAL_CHARACTERS)}]")


def validate_password_strength(value: str) -> str:
    """At least 8 chars with a digit, a lowercase, an uppercase and a special character."""
    if len(value) < PASSWORD_MIN_LEN:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LEN} characters long")
    if len(value) > PASSWORD_MAX_LEN:
        raise ValueError(f"Password must not exceed {PASSWORD_MAX_LEN} characters")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not _SPECIAL_RE.search(value):
        raise ValueError("Password must contain at least one special character")
    return value


class SignupRequest(BaseModel):
    """Email/password signup."""

    model_config = _ALIASED

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., description="Password")
    password_confirmation: str = Field(
        ...,
        alias="passwordConfirmation",
        description="Must match password",
    )

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode="after")
    def check_confirmation(self) -> "SignupRequest":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class TokenRequest(BaseModel):
    """Verification or identity token, from the confirmation link or the Google callback redirect."""

    token: str = Field(..., min_length=1, description="Signed token")


class MessageResponse(BaseModel):
    message: str


class AccountResponse(BaseModel):
    """Account as returned after signup (no credentials)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str | None = None
    is_email_verified: bool
    created_at: datetime | None = None


class FederatedProfile(BaseModel):
    """Identity returned by an external provider (Google userinfo)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    provider_id: str = Field(..., min_length=1, alias="sub", description="Provider subject")
    email: EmailStr
    email_verified: bool = False
    name: str | None = None
