"""User-related Pydantic schemas for request/response validation."""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import BaseModelSchema, BaseSchema


class ProfileCreateRequest(BaseSchema):
    """Schema for creating the caller's local profile."""

    name: Optional[str] = Field(None, max_length=255, description="Display name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class SendConfirmationRequest(BaseSchema):
    """Schema for the signup confirmation email request."""

    email: EmailStr = Field(..., description="Address to confirm")
    name: Optional[str] = Field(None, max_length=255)


class UserResponse(BaseModelSchema):
    """Schema for user response data."""

    email: str
    name: Optional[str] = None
    avatar: Optional[str] = None
