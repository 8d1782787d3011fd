"""Complaint endpoints: submit (user), list/filter, change status and delete (admin)."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_app_settings, get_mailer
from app.api.v1.auth import get_current_user, require_admin
from app.core.config import Settings
from app.core.database import get_db
from app.core.errors import ApiError
from app.schemas.auth import CurrentUser
from app.schemas.complaint import (
    ComplaintCreateRequest,
    ComplaintFilters,
    ComplaintOut,
    StatusUpdateRequest,
)
from app.schemas.envelope import ApiResponse
from app.services.complaints import (
    ComplaintNotFoundError,
    ComplaintValidationError,
    InvalidStatusTransitionError,
    create_complaint,
    delete_complaint,
    list_complaints,
    update_status,
)
from app.services.notifications import Mailer, notify_new_complaint, notify_status_update

router = APIRouter()


# Complaint.id is a signed 32-bit Integer column.
MAX_COMPLAINT_ID = 2**31 - 1


def _parse_id(complaint_id: str) -> int | None:
    """
    Path ids that are not plain ASCII digits within the column range cannot match
    any complaint; None looks up nothing.
    """
    if not (complaint_id.isascii() and complaint_id.isdigit()):
        return None
    value = int(complaint_id)
    if value > MAX_COMPLAINT_ID:
        return None
    return value


@router.post(
    "",
    response_model=ApiResponse[ComplaintOut],
    status_code=status.HTTP_201_CREATED,
)
def post_complaint(
    body: ComplaintCreateRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> ApiResponse[ComplaintOut]:
    """
    Submit a complaint as the authenticated user. Status always starts as Pending.
    The admin is notified by email in the background.
    """
    try:
        complaint = create_complaint(
            db,
            owner_id=user.id,
            title=body.title,
            description=body.description,
            category=body.category,
            priority=body.priority,
        )
    except ComplaintValidationError as e:
        raise ApiError(status.HTTP_400_BAD_REQUEST, e.message) from e

    out = ComplaintOut.model_validate(complaint)
    background_tasks.add_task(notify_new_complaint, mailer, out, settings.ADMIN_EMAIL)
    return ApiResponse(success=True, data=out, message="Complaint submitted successfully")


@router.get("", response_model=ApiResponse[list[ComplaintOut]])
def get_complaints(
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    priority: str | None = None,
    category: str | None = None,
) -> ApiResponse[list[ComplaintOut]]:
    """List all complaints (admin only), newest first. Filters combine with AND."""
    filters = ComplaintFilters(status=status_filter, priority=priority, category=category)
    complaints = list_complaints(db, filters)
    return ApiResponse(success=True, data=complaints, message="Complaints retrieved successfully")


@router.patch("/{complaint_id}", response_model=ApiResponse[ComplaintOut])
def patch_complaint_status(
    complaint_id: str,
    body: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> ApiResponse[ComplaintOut]:
    """Change a complaint's status (admin only). Any status may follow any other."""
    try:
        change = update_status(db, _parse_id(complaint_id), body.status)
    except ComplaintValidationError as e:
        raise ApiError(status.HTTP_400_BAD_REQUEST, e.message) from e
    except InvalidStatusTransitionError as e:
        raise ApiError(status.HTTP_400_BAD_REQUEST, e.message) from e
    except ComplaintNotFoundError as e:
        raise ApiError(status.HTTP_404_NOT_FOUND, e.message) from e

    out = ComplaintOut.model_validate(change.complaint)
    background_tasks.add_task(
        notify_status_update, mailer, out, settings.ADMIN_EMAIL, change.old_status
    )
    return ApiResponse(success=True, data=out, message="Complaint status updated successfully")


@router.delete("/{complaint_id}", response_model=ApiResponse[None])
def delete_complaint_by_id(
    complaint_id: str,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
) -> ApiResponse[None]:
    """Delete a complaint (admin only)."""
    try:
        delete_complaint(db, _parse_id(complaint_id))
    except ComplaintNotFoundError as e:
        raise ApiError(status.HTTP_404_NOT_FOUND, e.message) from e
    return ApiResponse(success=True, data=None, message="Complaint deleted successfully")
