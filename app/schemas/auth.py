"""Request/response schemas for auth endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)

UserRole = Literal["user", "admin"]


class RegisterRequest(BaseModel):
    """New account details; role is always 'user' for self-registration."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Email")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN, description="Display name")

    @field_validator("email", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., max_length=EMAIL_MAX_LEN, description="Email")
    password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Password")


class CurrentUser(BaseModel):
    """Authenticated identity decoded from token claims (id, email, role, name)."""

    model_config = {"from_attributes": True}

    id: int
    email: str
    role: str
    name: str


class UserOut(BaseModel):
    """Public user fields (no password hash)."""

    model_config = {"from_attributes": True}

    id: int
    email: str
    name: str
    role: str
    created_at: datetime | None = None


class AuthData(BaseModel):
    """Token and user returned by register and login."""

    token: str = Field(..., description="JWT access token; send as Authorization: Bearer <token>")
    user: UserOut
