"""Access gate: turn an Authorization header into an identity or a denial.

Callers get a tagged result instead of an exception so every protected operation
has to branch on Granted vs Denied explicitly.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from app.core.security import IDENTITY_CLAIMS, verify_token
from app.schemas.auth import CurrentUser

if TYPE_CHECKING:
    from app.core.config import Settings

BEARER_PREFIX = "Bearer "

ERROR_TOKEN_REQUIRED = "Access token required"
ERROR_TOKEN_INVALID = "Invalid or expired token"
ERROR_ADMIN_REQUIRED = "Admin access required"


@dataclass(frozen=True)
class Granted:
    identity: CurrentUser


@dataclass(frozen=True)
class Denied:
    status_code: int
    error: str


GateResult = Granted | Denied


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token after the literal 'Bearer ' scheme, or None."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):]


def _identity_from_claims(claims: dict[str, Any]) -> CurrentUser | None:
    if any(claims.get(key) is None for key in IDENTITY_CLAIMS):
        return None
    try:
        return CurrentUser(
            id=claims["id"],
            email=claims["email"],
            role=claims["role"],
            name=claims["name"],
        )
    except ValidationError:
        return None


def require_auth(authorization: str | None, settings: "Settings") -> GateResult:
    """
    Granted with the token's claims as identity, or Denied(401).

    Claims are trusted as-is until expiry; the role is not re-read from storage.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return Denied(status_code=401, error=ERROR_TOKEN_REQUIRED)

    claims = verify_token(token, settings)
    if claims is None:
        return Denied(status_code=401, error=ERROR_TOKEN_INVALID)

    identity = _identity_from_claims(claims)
    if identity is None:
        return Denied(status_code=401, error=ERROR_TOKEN_INVALID)
    return Granted(identity=identity)


def require_admin(authorization: str | None, settings: "Settings") -> GateResult:
    """require_auth, then Denied(403) unless the identity's role is 'admin'."""
    result = require_auth(authorization, settings)
    if isinstance(result, Denied):
        return result
    if result.identity.role != "admin":
        return Denied(status_code=403, error=ERROR_ADMIN_REQUIRED)
    return result
