"""Register and login endpoints plus auth dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Header, status
from sqlalchemy.orm import Session

from app.api.deps import get_app_settings, get_mailer
from app.core.config import Settings
from app.core.database import get_db
from app.core.errors import ApiError
from app.core.security import hash_password, issue_token, verify_password
from app.models import User
from app.schemas.auth import AuthData, CurrentUser, LoginRequest, RegisterRequest, UserOut
from app.schemas.envelope import ApiResponse
from app.services import access_gate
from app.services.access_gate import Denied
from app.services.notifications import Mailer, notify_welcome
from app.services.users import EmailAlreadyRegisteredError, create_user, find_by_email

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_CREDENTIALS = "Invalid credentials"


def _auth_data(user: User, settings: Settings) -> AuthData:
    user_out = UserOut.model_validate(user)
    identity = CurrentUser(
        id=user_out.id,
        email=user_out.email,
        role=user_out.role,
        name=user_out.name,
    )
    return AuthData(token=issue_token(identity, settings), user=user_out)


@router.post(
    "/register",
    response_model=ApiResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> ApiResponse[AuthData]:
    """
    Create a 'user' account and return a token for it.
    A welcome email is sent in the background; its failure does not affect the response.
    """
    try:
        user = create_user(
            db,
            email=body.email,
            name=body.name,
            password_hash=hash_password(body.password, rounds=settings.BCRYPT_ROUNDS),
            role="user",
        )
    except EmailAlreadyRegisteredError as e:
        raise ApiError(status.HTTP_400_BAD_REQUEST, e.message) from e

    data = _auth_data(user, settings)
    background_tasks.add_task(notify_welcome, mailer, data.user.email, data.user.name)
    return ApiResponse(success=True, data=data, message="User registered successfully")


@router.post("/login", response_model=ApiResponse[AuthData])
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ApiResponse[AuthData]:
    """
    Authenticate with email and password; returns a JWT access token.
    Unknown email and wrong password give the same 401.
    """
    user = find_by_email(db, body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Login failed")
        raise ApiError(status.HTTP_401_UNAUTHORIZED, INVALID_CREDENTIALS)
    return ApiResponse(success=True, data=_auth_data(user, settings), message="Login successful")


def get_current_user(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Dependency: require a valid Bearer JWT and return its identity. Raises 401 otherwise."""
    result = access_gate.require_auth(authorization, settings)
    if isinstance(result, Denied):
        raise ApiError(result.status_code, result.error)
    return result.identity


def require_admin(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Dependency: require an authenticated identity with role 'admin'. Raises 401 or 403."""
    result = access_gate.require_admin(authorization, settings)
    if isinstance(result, Denied):
        raise ApiError(result.status_code, result.error)
    return result.identity
