"""
User model with authentication and role management.
Handles accounts for buyers, sellers (agents) and administrators.
"""

from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from estate_api.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
import enum
import uuid
from typing import Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """
    User role enumeration for role-based access control.

    ``buyer`` and ``seller`` are accepted as aliases of ``user`` and ``agent``.
    """
    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            aliases = {"buyer": cls.USER, "seller": cls.AGENT}
            if lowered in aliases:
                return aliases[lowered]
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class User(Base):
    """
    User model for authentication and authorization.
    The password is only ever stored as a bcrypt hash.
    """

    __tablename__ = "users"

    # Stored lower-cased, so uniqueness is case-insensitive
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
        index=True
    )
    profile_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """
        Validate email format using email-validator and lower-case it.

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email.strip(), check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """Hash a password using bcrypt."""
        if not password:
            raise ValueError("Password is required")
        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return pwd_context.verify(password, self.password_hash)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_manage_property(self, property_agent_id: Optional[uuid.UUID]) -> bool:
        """
        Check if user can manage a specific property.

        Admins manage everything; agents only what they own.
        """
        if self.is_admin:
            return True
        return property_agent_id is not None and self.id == property_agent_id
