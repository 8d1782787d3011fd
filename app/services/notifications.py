"""Best-effort email notifications: new complaint, status change, welcome.

Every notify_* function logs and swallows delivery errors; notification is never
part of the triggering request's success.
"""

from __future__ import annotations

import html
import logging
from datetime import UTC, datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING, Protocol

import aiosmtplib

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.schemas.complaint import ComplaintOut

logger = logging.getLogger(__name__)

PRIORITY_COLORS = {"High": "#e74c3c", "Medium": "#f39c12", "Low": "#27ae60"}


class Mailer(Protocol):
    """Anything that can deliver one HTML email."""

    async def send(self, to_email: str, subject: str, html_content: str) -> None: ...


class SmtpMailer:
    """Send mail over SMTP with STARTTLS via aiosmtplib."""

    def __init__(self, settings: Settings) -> None:
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = (
            settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else None
        )
        self.from_email = settings.EMAIL_FROM or settings.SMTP_USER
        self.from_name = settings.EMAIL_FROM_NAME
        self.timeout = settings.SMTP_TIMEOUT_SEC

    @property
    def is_configured(self) -> bool:
        return bool(self.user and self.password)

    async def send(self, to_email: str, subject: str, html_content: str) -> None:
        if not self.is_configured:
            logger.warning("SMTP not configured (SMTP_USER/SMTP_PASSWORD); skipping email: %s", subject)
            return

        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        message["Subject"] = subject
        message.attach(MIMEText(html_content, "html"))

        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.user,
            password=self.password,
            start_tls=True,
            timeout=self.timeout,
        )


def _wrap(body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"{body}</div>"
    )


def render_new_complaint(complaint: ComplaintOut) -> tuple[str, str]:
    """Subject and HTML body for the admin notice about a new complaint."""
    color = PRIORITY_COLORS.get(complaint.priority, "#27ae60")
    submitted = complaint.date_submitted.strftime("%Y-%m-%d %H:%M:%S")
    body = (
        '<h2 style="color: #333;">New Complaint Submitted</h2>'
        '<div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f'<h3 style="margin-top: 0; color: #555;">{html.escape(complaint.title)}</h3>'
        f"<p><strong>Category:</strong> {html.escape(complaint.category)}</p>"
        f'<p><strong>Priority:</strong> <span style="color: {color};">'
        f"{html.escape(complaint.priority)}</span></p>"
        "<p><strong>Description:</strong></p>"
        '<p style="background-color: white; padding: 15px; border-radius: 5px; '
        f'border-left: 4px solid #3498db;">{html.escape(complaint.description)}</p>'
        f"<p><strong>Date Submitted:</strong> {submitted}</p>"
        "</div>"
        '<p style="color: #666; font-size: 14px;">'
        "Please review and take appropriate action on this complaint.</p>"
    )
    return f"New Complaint: {complaint.title}", _wrap(body)


def render_status_update(complaint: ComplaintOut, old_status: str) -> tuple[str, str]:
    """Subject and HTML body for the admin notice about a status change."""
    updated = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    body = (
        '<h2 style="color: #333;">Complaint Status Updated</h2>'
        '<div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f'<h3 style="margin-top: 0; color: #555;">{html.escape(complaint.title)}</h3>'
        f'<p><strong>Previous Status:</strong> <span style="color: #e74c3c;">'
        f"{html.escape(old_status)}</span></p>"
        f'<p><strong>New Status:</strong> <span style="color: #27ae60;">'
        f"{html.escape(complaint.status)}</span></p>"
        f"<p><strong>Category:</strong> {html.escape(complaint.category)}</p>"
        f"<p><strong>Priority:</strong> {html.escape(complaint.priority)}</p>"
        f"<p><strong>Date Updated:</strong> {updated}</p>"
        "</div>"
        '<p style="color: #666; font-size: 14px;">'
        "The complaint status has been successfully updated.</p>"
    )
    return f"Complaint Status Updated: {complaint.title}", _wrap(body)


def render_welcome(user_name: str) -> tuple[str, str]:
    """Subject and HTML body for the welcome email sent after registration."""
    body = (
        f'<h2 style="color: #333;">Welcome, {html.escape(user_name)}!</h2>'
        "<p>Thank you for registering with our Complaint Management System.</p>"
        "<p>You can now submit complaints and track their progress.</p>"
        '<div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        '<h3 style="margin-top: 0; color: #555;">Getting Started</h3>'
        "<ul>"
        "<li>Submit new complaints through the complaint form</li>"
        "<li>Track the status of your submitted complaints</li>"
        "<li>Receive updates on complaint progress</li>"
        "</ul>"
        "</div>"
        '<p style="color: #666; font-size: 14px;">'
        "If you have any questions, please contact our support team.</p>"
    )
    return "Welcome to Complaint Management System", _wrap(body)


async def _deliver(mailer: Mailer, to_email: str, subject: str, html_content: str, kind: str) -> bool:
    try:
        await mailer.send(to_email, subject, html_content)
    except Exception as e:
        logger.error(
            "Notification email failed",
            extra={"notification": kind, "reason": str(e)[:500]},
        )
        return False
    logger.info("Notification email sent", extra={"notification": kind})
    return True


async def notify_new_complaint(mailer: Mailer, complaint: ComplaintOut, admin_email: str) -> bool:
    subject, body = render_new_complaint(complaint)
    return await _deliver(mailer, admin_email, subject, body, "new_complaint")


async def notify_status_update(
    mailer: Mailer, complaint: ComplaintOut, admin_email: str, old_status: str
) -> bool:
    subject, body = render_status_update(complaint, old_status)
    return await _deliver(mailer, admin_email, subject, body, "status_update")


async def notify_welcome(mailer: Mailer, user_email: str, user_name: str) -> bool:
    subject, body = render_welcome(user_name)
    return await _deliver(mailer, user_email, subject, body, "welcome")
