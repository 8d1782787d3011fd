"""Shared dependencies: settings and mailer injected through app.state."""

from fastapi import Request

from app.core.config import Settings
from app.services.notifications import Mailer


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_mailer(request: Request) -> Mailer:
    """Mailer the app was created with (SmtpMailer in production, a fake in tests)."""
    return request.app.state.mailer
