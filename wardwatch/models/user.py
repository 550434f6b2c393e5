"""
User models for authentication and the current actor.
"""

from pydantic import EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from enum import Enum

from wardwatch.models.base import CamelModel
from wardwatch.models.ward import MAX_WARD_NUMBER, MIN_WARD_NUMBER


class UserRole(str, Enum):
    RESIDENT = "resident"
    ADMIN = "admin"


class RegisterRequest(CamelModel):
    """Body of POST /auth/register. Self-registration always yields a resident."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    ward_number: int = Field(..., ge=MIN_WARD_NUMBER, le=MAX_WARD_NUMBER)
    phone: Optional[str] = Field(None, min_length=10, max_length=15)
    address: Optional[str] = Field(None, max_length=300)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # bcrypt only reads 72 bytes; multi-byte characters count more than once
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password cannot exceed 72 bytes")
        return value

    class Config:
        str_strip_whitespace = True
        extra = "ignore"


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole = UserRole.RESIDENT
    ward_number: int
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserResponse


class Actor(CamelModel):
    """
    The authenticated caller as seen by the access policy.
    Only the role and ward affinity matter for authorization.
    """
    id: str
    role: UserRole
    ward_number: int
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
