"""
Pydantic schemas for authentication requests and responses.
Handles registration, login and session token data validation.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from estate_api.models.user import UserRole
from estate_api.schemas.user import UserResponse, parse_role


class RegisterRequest(BaseModel):
    """Self-service registration request."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["alice@example.com"]
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="User's password (minimum 6 characters)",
        examples=["secret1"]
    )
    full_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's full name",
        examples=["Alice Doe"]
    )
    phone: Optional[str] = Field(
        None,
        max_length=50,
        description="Contact phone number",
        examples=["+1 512 555 0100"]
    )
    role: Optional[UserRole] = Field(
        None,
        description="Requested role; self-registered accounts are always created as user",
        examples=["buyer"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()

    @field_validator('role', mode='before')
    @classmethod
    def validate_role(cls, v):
        return parse_role(v)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["alice@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="User's password",
        examples=["secret1"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class AuthResponse(BaseModel):
    """Response for successful registration or login."""

    message: str = Field(..., examples=["Login successful"])
    user: UserResponse = Field(..., description="Authenticated user's profile")
    token: str = Field(
        ...,
        description="Signed session token, sent back as 'Authorization: Bearer <token>'",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )
    token_type: str = Field(default="bearer", examples=["bearer"])
    expires_in: int = Field(
        ...,
        description="Token lifetime in seconds",
        examples=[604800]
    )
