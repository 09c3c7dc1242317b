"""Subscription notifications via Resend API."""

import asyncio
import logging
from datetime import datetime
from html import escape

import resend

from poesis.config import get_settings
from poesis.models.user import User
from poesis.schemas.subscription import CardSummary

logger = logging.getLogger(__name__)


async def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """Send an email via Resend.

    Returns True on success, False on failure.
    """
    settings = get_settings()
    if not settings.resend_api_key:
        logger.warning("Resend API key not configured, skipping email to %s", to_email)
        return False

    try:
        await asyncio.to_thread(
            resend.Emails.send,
            {
                "from": settings.email_from,
                "to": [to_email],
                "subject": subject,
                "html": html_body,
            },
        )
        logger.info("Email '%s' sent to %s", subject, to_email)
        return True
    except Exception as e:
        logger.error("Failed to send email to %s: %s", to_email, e)
        return False


async def send_subscription_confirmation(
    user: User,
    plan: str,
    end_date: datetime,
    card: CardSummary | None = None,
) -> bool:
    settings = get_settings()
    paid_with = ""
    if card and card.last4:
        paid_with = f"<p>Charged to {escape(card.brand or 'card')} ending in {escape(card.last4)}.</p>"

    html_body = (
        f"<p>Hi {escape(user.username)},</p>"
        f"<p>Your {escape(plan)} {escape(settings.app_name)} subscription is active "
        f"until {end_date.strftime('%B %d, %Y')}.</p>"
        f"{paid_with}"
        f'<p><a href="{settings.app_url}">Start reading</a></p>'
    )
    return await send_email(
        to_email=user.email,
        subject=f"Your {settings.app_name} subscription is active",
        html_body=html_body,
    )
