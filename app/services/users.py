"""Credential store: user lookup and creation."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User

logger = logging.getLogger(__name__)


class EmailAlreadyRegisteredError(Exception):
    """Raised when creating a user whose email is already stored."""

    def __init__(self, email: str) -> None:
        self.email = email
        self.message = "User already exists with this email"
        super().__init__(self.message)


def find_by_email(db: Session, email: str) -> User | None:
    """Return the user with exactly this email, or None."""
    return db.query(User).filter(User.email == email).first()


def create_user(
    db: Session,
    email: str,
    name: str,
    password_hash: str,
    role: str = "user",
) -> User:
    """
    Persist a new user. The email is checked explicitly first so duplicates are
    reported as EmailAlreadyRegisteredError; a concurrent insert that trips the
    unique index is mapped to the same error.
    """
    if find_by_email(db, email) is not None:
        raise EmailAlreadyRegisteredError(email)

    user = User(email=email, name=name, password_hash=password_hash, role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise EmailAlreadyRegisteredError(email) from e
    db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": role})
    return user
