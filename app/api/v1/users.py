"""Endpoints scoped to the authenticated user."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.schemas.auth import CurrentUser
from app.schemas.complaint import ComplaintOut
from app.schemas.envelope import ApiResponse
from app.services.complaints import list_owned_by

router = APIRouter()


@router.get("/complaints", response_model=ApiResponse[list[ComplaintOut]])
def get_own_complaints(
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse[list[ComplaintOut]]:
    """The caller's own complaints, newest first. Ownership is part of the query."""
    complaints = [ComplaintOut.model_validate(c) for c in list_owned_by(db, user.id)]
    return ApiResponse(
        success=True,
        data=complaints,
        message="User complaints retrieved successfully",
    )
