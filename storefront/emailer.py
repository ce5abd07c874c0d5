# storefront/emailer.py
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from .config import settings

log = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, html: str, text: str | None = None) -> bool:
    """Deliver one message over SMTP.

    Failures are logged and reported through the return value; a broken mail
    server never fails the request that triggered the email.
    """
    if not to_email:
        return False
    if not settings.smtp_enabled:
        log.info("SMTP not configured, skipping email %r to %s", subject, to_email)
        return False

    msg = EmailMessage()
    msg["From"] = settings.mail_from
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text or "Please view this message in an HTML capable email client.")
    msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        log.error("email sending failed (%s): %s", to_email, e)
        return False

    log.info("email sent to %s", to_email)
    return True
