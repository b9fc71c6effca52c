"""
Email Service using Resend

Transactional email for the student account flow.
"""

import asyncio
import logging
import os
from html import escape

import resend

logger = logging.getLogger(__name__)

resend.api_key = os.getenv("RESEND_API_KEY")

EMAIL_FROM = os.getenv("EMAIL_FROM", "RegiSmart <noreply@regismart.dev>")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")

# When set, every password reset email goes to this inbox instead of the student
PASSWORD_RESET_TO = os.getenv("PASSWORD_RESET_TO", "").strip() or None


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
    text_content: str | None = None,
) -> bool:
    """
    Send an email using Resend.

    Without RESEND_API_KEY the email is logged instead of sent.

    Returns:
        True if the email was sent (or logged)
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        if text_content:
            params["text"] = text_content

        # Resend's client is synchronous
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_password_reset(to_email: str, student_name: str, token: str) -> bool:
    """Send the password reset link. The link expires in 30 minutes."""
    safe_name = escape(student_name) or "Student"
    reset_url = f"{FRONTEND_URL}/auth/reset-password?token={token}"

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #7a1f2b; margin-bottom: 24px; }}
            .button {{ display: inline-block; background-color: #7a1f2b; color: white; padding: 12px 18px; text-decoration: none; border-radius: 6px; margin: 24px 0; }}
            .footer {{ margin-top: 40px; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Reset Your Password</h1>

            <p>Hi {safe_name},</p>

            <p>We received a request to reset your RegiSmart password.</p>

            <a href="{reset_url}" class="button">Reset Password</a>

            <p><strong>This link expires in 30 minutes.</strong></p>

            <div class="footer">
                <p>If you didn't request this, you can ignore this email.</p>
                <p>RegiSmart - Registrar Document Requests</p>
            </div>
        </div>
    </body>
    </html>
    """
    text_content = (
        f"Hi {student_name or 'Student'},\n\n"
        "We received a request to reset your RegiSmart password.\n\n"
        f"Reset your password: {reset_url}\n\n"
        "This link will expire in 30 minutes. "
        "If you didn't request this, you can ignore this email."
    )

    return await send_email(
        to_email=PASSWORD_RESET_TO or to_email,
        subject="Reset your RegiSmart password",
        html_content=html_content,
        text_content=text_content,
    )
