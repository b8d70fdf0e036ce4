"""
Email Service - outgoing mail over SMTP (fastapi-mail).

Route handlers never await these directly; they are queued with FastAPI
BackgroundTasks through `send_in_background`, so the HTTP response does not
depend on whether delivery succeeded.
"""

import logging
from html import escape
from typing import List

from fastapi_mail import FastMail, MessageSchema, MessageType, ConnectionConfig

from wostup.core.config import get_settings

logger = logging.getLogger(__name__)


def get_mail_config() -> ConnectionConfig:
    settings = get_settings()
    port = settings.smtp_port or 587
    return ConnectionConfig(
        MAIL_USERNAME=settings.smtp_user,
        MAIL_PASSWORD=settings.smtp_pass,
        MAIL_FROM=settings.email_from,
        MAIL_FROM_NAME=settings.platform_name,
        MAIL_PORT=port,
        MAIL_SERVER=settings.smtp_host,
        MAIL_STARTTLS=port != 465,
        MAIL_SSL_TLS=port == 465,
        USE_CREDENTIALS=bool(settings.smtp_user),
        VALIDATE_CERTS=True,
        SUPPRESS_SEND=1 if settings.mail_suppress_send else 0,
    )


class EmailService:
    @staticmethod
    async def send_email(subject: str, recipients: List[str], body: str):
        settings = get_settings()
        if not settings.smtp_configured and not settings.mail_suppress_send:
            raise RuntimeError("SMTP_HOST is not configured")

        message = MessageSchema(
            subject=subject,
            recipients=recipients,
            body=body,
            subtype=MessageType.html
        )
        fm = FastMail(get_mail_config())
        await fm.send_message(message)
        logger.info("Email '%s' sent to %d recipient(s)", subject, len(recipients))

    @staticmethod
    async def send_verification_email(email: str, code: str):
        settings = get_settings()
        platform = escape(settings.platform_name)
        subject = f"Verify Your Email – {settings.platform_name}"
        body = (
            '<div style="font-family: Arial, sans-serif; line-height:1.4; color:#111;">'
            f'<h2>Verify Your Email – {platform}</h2>'
            '<p>Thanks for registering. Use the one-time verification code below to verify '
            f'your email address. This code expires in {settings.verification_token_ttl_hours} hours.</p>'
            '<p style="text-align:center; margin:28px 0; font-size:22px; letter-spacing:4px;">'
            f'<strong>{escape(code)}</strong></p>'
            "<p>If you didn't request this, ignore this email or contact support.</p>"
            '</div>'
        )
        await EmailService.send_email(subject, [email], body)

    @staticmethod
    async def send_candidate_update(email: str, name: str, subject: str, message: str):
        body = (
            f'<p>Hi {escape(name)},</p>'
            f'<p>{escape(message)}</p>'
            f'<p>The {escape(get_settings().platform_name)} team</p>'
        )
        await EmailService.send_email(subject, [email], body)

    @staticmethod
    async def send_interview_invitation(email: str, name: str, job_role: str, interview: dict):
        when = interview["scheduledAt"].strftime("%d %b %Y, %H:%M UTC")
        if interview.get("mode") == "online":
            venue = f'Meeting link: {escape(interview.get("meetingLink") or "will be shared")}'
        else:
            venue = f'Location: {escape(interview.get("location") or "")}'
        body = (
            f'<p>Hi {escape(name)},</p>'
            f'<p>Your interview for <strong>{escape(job_role)}</strong> is scheduled for '
            f'<strong>{when}</strong> with {escape(interview["interviewer"])}.</p>'
            f'<p>{venue}</p>'
        )
        await EmailService.send_email(f"Interview scheduled – {job_role}", [email], body)


async def send_in_background(send, *args):
    """
    Run an EmailService coroutine as a detached task.
    Failures are logged only; callers have already answered the request.
    """
    try:
        await send(*args)
    except Exception:
        logger.exception("Email send failed (%s)", getattr(send, "__name__", "email"))
