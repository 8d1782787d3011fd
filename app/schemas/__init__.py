"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthData,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    UserOut,
)
from app.schemas.complaint import (
    ComplaintCreateRequest,
    ComplaintFilters,
    ComplaintOut,
    ComplaintOwner,
    StatusUpdateRequest,
)
from app.schemas.envelope import ApiResponse
from app.schemas.health import HealthResponse

__all__ = [
    "ApiResponse",
    "AuthData",
    "ComplaintCreateRequest",
    "ComplaintFilters",
    "ComplaintOut",
    "ComplaintOwner",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "StatusUpdateRequest",
    "UserOut",
]
