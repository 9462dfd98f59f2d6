"""Authentication schemas."""
import uuid
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from ..core.passwords import PASSWORD_MAX_BYTES, password_too_long
from .common import BaseSchema, MessageResponse

PASSWORD_MIN_LENGTH = 6


def _check_password_bytes(value: str) -> str:
    if password_too_long(value):
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class RegisterRequest(BaseSchema):
    """Registration request schema."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, description="User password")
    name: Optional[str] = Field(None, max_length=255, description="Display name")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=1, description="User password")


class EmailRequest(BaseSchema):
    """Resend-verification and forgot-password body."""

    email: EmailStr = Field(..., description="User email")


class NewPasswordRequest(BaseSchema):
    """Password reset confirmation body."""

    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, description="New password")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginResponse(MessageResponse):
    """Login response schema."""

    token: str = Field(..., description="Signed session token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class UserIdentity(BaseSchema):
    """Identity carried by the session token."""

    id: uuid.UUID = Field(..., description="User ID")
    email: str = Field(..., description="User email")


class ProfileResponse(MessageResponse):
    user: UserIdentity
