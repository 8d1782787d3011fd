"""Pydantic schemas for complaints: submission, status update, filters and output."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ComplaintCategory = Literal["Product", "Service", "Support", "Technical", "Other"]
ComplaintPriority = Literal["Low", "Medium", "High"]

CATEGORY_VALUES: frozenset[str] = frozenset(
    {"Product", "Service", "Support", "Technical", "Other"}
)
PRIORITY_VALUES: frozenset[str] = frozenset({"Low", "Medium", "High"})


class ComplaintCreateRequest(BaseModel):
    """
    Complaint submission. Fields are optional here so that missing values are
    reported by the complaint service as a single 400, not a schema error.
    Any client-supplied status is ignored.
    """

    model_config = {"extra": "ignore"}

    title: str | None = Field(default=None, description="Short title (max 100 chars).")
    description: str | None = Field(default=None, description="Details (max 1000 chars).")
    category: str | None = Field(
        default=None,
        description="One of Product, Service, Support, Technical, Other.",
    )
    priority: str | None = Field(default=None, description="One of Low, Medium, High.")


class StatusUpdateRequest(BaseModel):
    """Admin status change."""

    model_config = {"extra": "ignore"}

    status: str | None = Field(default=None, description="Pending, In Progress, or Resolved.")


class ComplaintFilters(BaseModel):
    """Optional equality filters for the admin list; combined with AND."""

    status: str | None = None
    priority: str | None = None
    category: str | None = None


class ComplaintOwner(BaseModel):
    """Owner summary attached to complaints in the admin list."""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str


class ComplaintOut(BaseModel):
    """Complaint as returned by the API."""

    model_config = {"from_attributes": True}

    id: int
    title: str
    description: str
    category: str
    priority: str
    status: str
    date_submitted: datetime
    user_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    owner: ComplaintOwner | None = None
