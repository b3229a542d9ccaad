"""
Pydantic schemas for user responses and administrative user updates.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
from estate_api.models.user import UserRole
import uuid


def parse_role(value):
    """Accept role names case-insensitively, including buyer/seller aliases."""
    if value is None or isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        raise ValueError(f"Role must be one of: {', '.join(r.value for r in UserRole)} (or buyer/seller)")


class UserResponse(BaseModel):
    """User response schema (excluding sensitive data)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(
        ...,
        description="User's unique identifier",
        examples=["123e4567-e89b-12d3-a456-426614174000"]
    )
    email: str = Field(
        ...,
        description="User's email address",
        examples=["alice@example.com"]
    )
    full_name: str = Field(
        ...,
        description="User's full name",
        examples=["Alice Doe"]
    )
    phone: Optional[str] = Field(None, description="Contact phone number")
    role: UserRole = Field(
        ...,
        description="User's role",
        examples=["user"]
    )
    profile_image: Optional[str] = Field(None, description="Profile image URL")
    is_active: bool = Field(
        ...,
        description="Whether the user account is active",
        examples=[True]
    )
    created_at: datetime = Field(
        ...,
        description="Account creation timestamp"
    )


class UserListResponse(BaseModel):
    """Schema for the administrative user list."""

    users: List[UserResponse] = Field(..., description="Users, newest first")
    total: int = Field(..., description="Number of users returned", examples=[12])


class UserRoleUpdate(BaseModel):
    """Schema for changing a user's role."""

    role: UserRole = Field(
        ...,
        description="New role: user, agent or admin",
        examples=["agent"]
    )

    @field_validator('role', mode='before')
    @classmethod
    def validate_role(cls, v):
        return parse_role(v)
