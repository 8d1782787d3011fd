"""Complaint status vocabulary and transition policy.

Every transition between the three states is currently allowed, including
self-transitions and moving a Resolved complaint back to Pending. Tightening the
policy means removing a target from ALLOWED_TRANSITIONS.
"""

from typing import Literal

ComplaintStatus = Literal["Pending", "In Progress", "Resolved"]

PENDING: ComplaintStatus = "Pending"
IN_PROGRESS: ComplaintStatus = "In Progress"
RESOLVED: ComplaintStatus = "Resolved"

# Order is display order; Pending is the only creation state.
STATUS_ORDER: tuple[str, ...] = (PENDING, IN_PROGRESS, RESOLVED)
STATUS_VALUES: frozenset[str] = frozenset(STATUS_ORDER)
INITIAL_STATUS: ComplaintStatus = PENDING

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({PENDING, IN_PROGRESS, RESOLVED}),
    IN_PROGRESS: frozenset({PENDING, IN_PROGRESS, RESOLVED}),
    RESOLVED: frozenset({PENDING, IN_PROGRESS, RESOLVED}),
}


def is_valid_status(value: object) -> bool:
    """True if value is exactly one of the status literals (case-sensitive)."""
    return isinstance(value, str) and value in STATUS_VALUES


def can_transition(current: str, target: str) -> bool:
    """True if the policy allows moving from current to target."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())
