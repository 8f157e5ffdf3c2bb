"""
Email Service for the Recipes backend

Handles sending magic link emails using Resend.
Supports both development (log output) and production (Resend API) modes.
"""

import html
import logging

import resend
from fastapi.concurrency import run_in_threadpool

from app.core.config import get_settings

logger = logging.getLogger(__name__)


def render_magic_link_email(magic_link_url: str, expires_in_minutes: int) -> str:
    """Render the HTML body of the sign-in email."""
    link = html.escape(magic_link_url, quote=True)
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Your Recipes Sign-In Link</title>
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="text-align: center; margin-bottom: 30px;">
            <h1 style="color: #00743e;">Remix Recipes</h1>
        </div>

        <h2 style="color: #333;">Log in to Remix Recipes</h2>
        <p>Hi there,</p>
        <p>Click the button below to log in. The link only works in the browser where you requested it.</p>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{link}"
               style="background-color: #00743e; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; display: inline-block; font-weight: bold;">
                Log In
            </a>
        </div>

        <p><strong>This link expires in {expires_in_minutes} minutes</strong> and can only be used once.</p>
        <p>If you didn't request this link, please ignore this email.</p>
    </body>
    </html>
    """


async def send_magic_link_email(email: str, magic_link_url: str, expires_in_minutes: int = 10) -> None:
    """Send magic link email for passwordless authentication."""
    settings = get_settings()
    api_key = settings.resend_api_key.get_secret_value()

    # Development mode - just log the link
    if not api_key:
        logger.info(
            "[DEV] Magic link for %s (expires in %d minutes): %s",
            email, expires_in_minutes, magic_link_url,
        )
        return

    resend.api_key = api_key
    params = {
        "from": settings.from_email,
        "to": [email],
        "subject": "Your Remix Recipes login link",
        "html": render_magic_link_email(magic_link_url, expires_in_minutes),
    }

    try:
        await run_in_threadpool(resend.Emails.send, params)
    except Exception:
        logger.exception("Failed to send magic link email to %s", email)
        raise

    logger.info("Magic link email sent to %s", email)
