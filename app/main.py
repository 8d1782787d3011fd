"""FastAPI application entrypoint. No business logic; only wiring, middleware and error envelopes."""

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import create_db_engine, create_session_factory
from app.core.errors import ApiError
from app.services.notifications import Mailer, SmtpMailer

logger = logging.getLogger(__name__)


def _envelope(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": None, "message": None, "error": error},
    )


def _validation_message(exc: RequestValidationError) -> str:
    """First validation problem as 'field: reason', or a generic message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    msg = first.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    """Map every error to {success: false, error}; internal details are only logged."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        return _envelope(exc.status_code, exc.error)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _envelope(status.HTTP_400_BAD_REQUEST, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail if isinstance(exc.detail, str) else jsonable_encoder(exc.detail)
        return _envelope(exc.status_code, str(detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    """
    Build the application with explicit dependencies.

    Defaults: cached env settings, an engine for settings.DATABASE_URL and an
    SMTP mailer. Tests pass an in-memory session factory and a fake mailer.
    """
    settings = settings or get_settings()
    if session_factory is None:
        session_factory = create_session_factory(
            create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        )
    if mailer is None:
        mailer = SmtpMailer(settings)

    if settings.uses_default_jwt_secret:
        logger.warning(
            "JWT_SECRET is not set; tokens are signed with the built-in fallback secret. "
            "Set JWT_SECRET before deploying."
        )

    app = FastAPI(
        title="Complaint Desk API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.mailer = mailer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Complaint Desk API"}

    return app


app = create_app()
