"""Uniform response wrapper shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """{success, data, message, error}; error is only set on failures."""

    success: bool
    data: T | None = None
    message: str | None = None
    error: str | None = None
