"""Outbound transactional mail: email-confirmation links over SMTP."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Confirm Your Email"


def build_confirmation_url(settings: Settings, token: str) -> str:
    return f"{settings.BASE_URL}{settings.API_V1_PREFIX}/auth/confirm-email/{token}"


def build_confirmation_message(settings: Settings, to_email: str, token: str) -> EmailMessage:
    """Plain-text message with an HTML alternative, both carrying the confirmation link."""
    url = build_confirmation_url(settings, token)
    msg = EmailMessage()
    msg["Subject"] = CONFIRMATION_SUBJECT
    msg["From"] = settings.MAIL_SENDER
    msg["To"] = to_email
    msg.set_content(f"Click the following link to confirm your email: {url}")
    msg.add_alternative(
        "<strong>Click the following link to confirm your email:</strong> "
        f'<a href="{url}">Confirm Email</a>',
        subtype="html",
    )
    return msg


def send_confirmation_email(settings: Settings, to_email: str, token: str) -> bool:
    """
    Send the confirmation email. Runs as a background task after the response.

    Failures are logged and not retried. Returns True when the message was handed
    to the SMTP server. With SMTP_HOST unset the link is logged instead (dev).
    """
    msg = build_confirmation_message(settings, to_email, token)
    if not settings.SMTP_HOST:
        logger.info(
            "SMTP_HOST not set; confirmation email not sent",
            extra={"to": to_email, "confirm_url": build_confirmation_url(settings, token)},
        )
        return False
    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD is not None:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD.get_secret_value())
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(
            "Confirmation email failed",
            extra={"to": to_email, "reason": str(e)[:500]},
        )
        return False
    logger.info("Confirmation email sent", extra={"to": to_email})
    return True
