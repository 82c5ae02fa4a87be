"""Transactional email through the Resend HTTP API. Sending is best effort."""
import logging
from html import escape
from typing import Optional

import requests

from app.config import settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str) -> bool:
    if not settings.resend_api_key:
        logger.warning(f"RESEND_API_KEY not set, skipping email to {to}")
        return False
    try:
        response = requests.post(
            settings.resend_api_url,
            json={"from": settings.email_from, "to": [to], "subject": subject, "html": html},
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
            timeout=settings.outbound_timeout_seconds,
        )
        if response.status_code >= 400:
            logger.error(f"Resend rejected email to {to} ({response.status_code}): {response.text[:200]}")
            return False
        logger.info(f"Email '{subject}' sent to {to}")
        return True
    except requests.RequestException as e:
        logger.error(f"Failed to send email to {to}: {e}")
        return False


def welcome_html(full_name: Optional[str]) -> str:
    name = escape(full_name) if full_name else "there"
    return (
        f"<h1>Welcome to TapIn, {name}!</h1>"
        "<p>You're one step away from meeting the people around you.</p>"
        "<p>Please confirm your email address using the verification link we sent you, "
        "then open the app to discover rooms nearby.</p>"
    )


def send_welcome_email(email: str, full_name: Optional[str] = None) -> bool:
    return send_email(email, "Welcome to TapIn", welcome_html(full_name))
