"""
Pydantic schemas for authentication requests and responses.
Handles registration, login, profile and password payloads.
"""

from pydantic import EmailStr, Field, StringConstraints, field_validator
from typing import Annotated, List, Optional
from datetime import datetime
from classifieds_api.models.user import UserRole
from classifieds_api.schemas.base import CamelModel, PartialModel


Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Password = Annotated[str, StringConstraints(min_length=6, max_length=128)]


class RegisterRequest(CamelModel):
    """Registration request schema."""

    name: Name = Field(..., description="Display name")
    email: EmailStr = Field(..., description="Email address, case-insensitive")
    password: Password = Field(..., description="Password (minimum 6 characters)")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class ProfileUpdateRequest(PartialModel):
    """Profile update: name and email are both optional."""

    name: Optional[Name] = None
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip() if v else v


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: Password


class UserStatusUpdateRequest(CamelModel):
    is_active: bool


class UserResponse(CamelModel):
    """User response schema (excluding sensitive data)."""

    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CurrentUser(UserResponse):
    """
    Identity resolved by the auth gate and passed explicitly to routes and
    services. Carries no password material.
    """

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserData(CamelModel):
    user: UserResponse


class AuthData(CamelModel):
    user: UserResponse
    token: str


class AuthResponse(CamelModel):
    """Envelope returned by register and login."""

    success: bool = True
    message: str
    data: AuthData


class UserEnvelope(CamelModel):
    success: bool = True
    message: Optional[str] = None
    data: UserData


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class UserListResponse(CamelModel):
    total: int
    page: int
    limit: int
    users: List[UserResponse]
