"""Outbound email to supervisors."""
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path

from fastapi.templating import Jinja2Templates

from app.core.config import settings

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))


def smtp_is_configured() -> bool:
    return bool(settings.smtp_host and (settings.mail_from or settings.smtp_user))


def build_validation_email(
    to_address: str, checklist_url: str, filename: str, title: str
) -> EmailMessage:
    context = {"checklist_url": checklist_url, "filename": filename, "title": title}
    msg = EmailMessage()
    msg["Subject"] = f"Sanitation Checklist for Review: {title}"
    msg["From"] = settings.mail_from or settings.smtp_user
    msg["To"] = to_address
    msg.set_content(templates.get_template("email/validation_request.txt").render(context))
    msg.add_alternative(
        templates.get_template("email/validation_request.html").render(context),
        subtype="html",
    )
    return msg


def send_validation_request(
    to_address: str, checklist_url: str, filename: str, title: str
) -> bool:
    """
    Email a supervisor the one-time validation link for a submission.

    Returns True when the message was handed to the SMTP server (or
    sending is suppressed), False on any failure. Never raises.
    """
    if not to_address:
        logger.warning("send_validation_request: missing recipient")
        return False

    msg = build_validation_email(to_address, checklist_url, filename, title)

    if settings.mail_suppress_send:
        logger.info(f"[MAIL_SUPPRESS_SEND] would send: {to_address} | {msg['Subject']}")
        return True

    if not smtp_is_configured():
        logger.error("send_validation_request: SMTP not configured")
        return False

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send validation email to {to_address}: {e}")
        return False

    logger.info(f"Validation email sent to {to_address} | subject={msg['Subject']}")
    return True


def get_mailer():
    """Dependency returning the function used to email supervisors."""
    return send_validation_request
