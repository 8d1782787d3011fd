"""Password hashing and JWT issuance/verification for authentication."""

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)

# Min/max lengths for registration input validation.
EMAIL_MAX_LEN = 255
NAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# Claims every identity token carries besides iat/exp.
IDENTITY_CLAIMS = ("id", "email", "role", "name")


def hash_password(plain_password: str, rounds: int = 10) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def issue_token(identity: "CurrentUser", settings: "Settings") -> str:
    """Create a signed JWT with id, email, role, name, iat and exp."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "id": identity.id,
        "email": identity.email,
        "role": identity.role,
        "name": identity.name,
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str, settings: "Settings") -> dict[str, Any] | None:
    """
    Decode and validate a JWT; return its claims, or None when the token is
    malformed, badly signed or expired. Never raises.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.PyJWTError as e:
        logger.debug("Token rejected: %s", e)
        return None
