"""
Mail Service
Outbound email over SMTP. One attempt per message, no retries.
"""
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from app.config import get_settings
from app.exceptions import MailDeliveryError
from app.utils.logger import log


def is_configured() -> bool:
    settings = get_settings()
    return bool(settings.smtp_host)


def send_email(to: str, subject: str, html: str) -> None:
    """
    Send one HTML email.

    Raises MailDeliveryError when SMTP is not configured or the transport
    fails; the caller decides what that means for its own state.
    """
    settings = get_settings()
    if not is_configured():
        log.error(f"Mail not sent to {to}: SMTP is not configured")
        raise MailDeliveryError("Failed to send email. Mail transport is not configured.")

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.mail_from or settings.smtp_user
    msg["To"] = to
    msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(
            settings.smtp_host, settings.smtp_port, timeout=settings.mail_timeout_seconds
        ) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_user and settings.smtp_password:
                server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        log.error(f"Mail to {to} failed: {type(e).__name__}: {e}")
        raise MailDeliveryError("Failed to send email. Please try again later.") from e

    log.info(f"Mail sent to {to}: {subject}")
