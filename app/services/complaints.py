"""Complaint store: creation, listing, status updates and deletion."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.models import Complaint, User
from app.models.complaint import DESCRIPTION_MAX_LEN, TITLE_MAX_LEN
from app.schemas.complaint import (
    CATEGORY_VALUES,
    PRIORITY_VALUES,
    ComplaintFilters,
    ComplaintOut,
    ComplaintOwner,
)
from app.services.complaint_status import (
    INITIAL_STATUS,
    can_transition,
    is_valid_status,
)

logger = logging.getLogger(__name__)


class ComplaintValidationError(Exception):
    """Raised when complaint input is missing or outside its allowed values. Nothing is written."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ComplaintNotFoundError(Exception):
    """Raised when no complaint has the requested id."""

    def __init__(self, complaint_id: int | str) -> None:
        self.complaint_id = complaint_id
        self.message = "Complaint not found"
        super().__init__(self.message)


class InvalidStatusTransitionError(Exception):
    """Raised when the transition policy forbids moving between two statuses."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        self.message = f"Cannot change status from {current} to {target}"
        super().__init__(self.message)


@dataclass(frozen=True)
class StatusChange:
    """Result of update_status: the saved complaint and the status read before writing."""

    complaint: Complaint
    old_status: str


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def create_complaint(
    db: Session,
    owner_id: int,
    title: str | None,
    description: str | None,
    category: str | None,
    priority: str | None,
) -> Complaint:
    """
    Validate and persist a new complaint owned by owner_id.

    Status is always Pending and date_submitted is now, whatever the caller sent.
    """
    if any(_is_blank(v) for v in (title, description, category, priority)):
        raise ComplaintValidationError("All fields are required")

    title = title.strip()
    description = description.strip()
    if len(title) > TITLE_MAX_LEN:
        raise ComplaintValidationError(
            f"Title cannot be more than {TITLE_MAX_LEN} characters"
        )
    if len(description) > DESCRIPTION_MAX_LEN:
        raise ComplaintValidationError(
            f"Description cannot be more than {DESCRIPTION_MAX_LEN} characters"
        )
    if category not in CATEGORY_VALUES:
        raise ComplaintValidationError(
            f"Category must be one of {sorted(CATEGORY_VALUES)}"
        )
    if priority not in PRIORITY_VALUES:
        raise ComplaintValidationError("Priority must be one of Low, Medium, High")

    complaint = Complaint(
        title=title,
        description=description,
        category=category,
        priority=priority,
        status=INITIAL_STATUS,
        date_submitted=datetime.now(UTC),
        user_id=owner_id,
    )
    db.add(complaint)
    db.commit()
    db.refresh(complaint)
    logger.info(
        "Complaint created",
        extra={"complaint_id": complaint.id, "user_id": owner_id, "priority": priority},
    )
    return complaint


def list_complaints(db: Session, filters: ComplaintFilters | None = None) -> list[ComplaintOut]:
    """
    All complaints matching every given filter, newest submission first, each
    with its owner's id, name and email when the owner exists.
    """
    query = db.query(Complaint)
    if filters is not None:
        if filters.status:
            query = query.filter(Complaint.status == filters.status)
        if filters.priority:
            query = query.filter(Complaint.priority == filters.priority)
        if filters.category:
            query = query.filter(Complaint.category == filters.category)
    complaints = query.order_by(Complaint.date_submitted.desc(), Complaint.id.desc()).all()

    owner_ids = {c.user_id for c in complaints}
    owners: dict[int, User] = {}
    if owner_ids:
        owners = {u.id: u for u in db.query(User).filter(User.id.in_(owner_ids)).all()}

    result: list[ComplaintOut] = []
    for c in complaints:
        out = ComplaintOut.model_validate(c)
        owner = owners.get(c.user_id)
        if owner is not None:
            out.owner = ComplaintOwner.model_validate(owner)
        result.append(out)
    return result


def list_owned_by(db: Session, owner_id: int) -> list[Complaint]:
    """Complaints owned by owner_id only, newest submission first."""
    return (
        db.query(Complaint)
        .filter(Complaint.user_id == owner_id)
        .order_by(Complaint.date_submitted.desc(), Complaint.id.desc())
        .all()
    )


def get_complaint(db: Session, complaint_id: int | None) -> Complaint | None:
    if complaint_id is None:
        return None
    return db.query(Complaint).filter(Complaint.id == complaint_id).first()


def update_status(db: Session, complaint_id: int | None, new_status: str | None) -> StatusChange:
    """
    Move a complaint to new_status.

    The status is validated before the complaint is read. old_status is what this
    call read; a concurrent update may land between the read and the commit, in
    which case the last commit wins and old_status can be stale.
    """
    if not is_valid_status(new_status):
        raise ComplaintValidationError("Valid status is required")

    complaint = get_complaint(db, complaint_id)
    if complaint is None:
        raise ComplaintNotFoundError(complaint_id)

    old_status = complaint.status
    if not can_transition(old_status, new_status):
        raise InvalidStatusTransitionError(old_status, new_status)

    complaint.status = new_status
    db.commit()
    db.refresh(complaint)
    logger.info(
        "Complaint status updated",
        extra={
            "complaint_id": complaint.id,
            "old_status": old_status,
            "new_status": new_status,
        },
    )
    return StatusChange(complaint=complaint, old_status=old_status)


def delete_complaint(db: Session, complaint_id: int | None) -> None:
    """Delete a complaint; raises ComplaintNotFoundError when it does not exist."""
    complaint = get_complaint(db, complaint_id)
    if complaint is None:
        raise ComplaintNotFoundError(complaint_id)
    db.delete(complaint)
    db.commit()
    logger.info("Complaint deleted", extra={"complaint_id": complaint_id})
