"""Send emails (OTP codes, announcements) via SMTP. Logged instead of sent when SMTP is not configured."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from coaching.core.config import settings

logger = logging.getLogger(__name__)

# Avoid blocking the request forever if SMTP is slow or unreachable
SMTP_TIMEOUT_SECONDS = 15


def smtp_configured() -> bool:
    return bool(settings.SMTP_HOST and settings.SMTP_USER)


def send_email(to_email: str, subject: str, body: str) -> bool:
    """
    Send a plain-text email from SMTP_FROM_EMAIL.

    Without SMTP settings the message is written to the log and counts as
    delivered, so local development works without a mail account.
    Returns False if the SMTP send failed.
    """
    if not smtp_configured():
        logger.warning("[SIMULATED EMAIL] To: %s, Subject: %s, Body: %s", to_email, subject, body)
        return True

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to_email
    msg.attach(MIMEText(body, "plain"))

    try:
        with smtplib.SMTP(
            settings.SMTP_HOST, settings.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS
        ) as server:
            server.starttls()
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.sendmail(settings.SMTP_FROM_EMAIL, [to_email], msg.as_string())
        logger.info("Email sent to %s", to_email)
        return True
    except smtplib.SMTPAuthenticationError as e:
        logger.exception("SMTP login failed for %s: %s", to_email, e)
        return False
    except (OSError, TimeoutError) as e:
        logger.exception("SMTP connection error (timeout or network) for %s: %s", to_email, e)
        return False
    except smtplib.SMTPException as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        return False


def announcement_recipient() -> str:
    return settings.NOTIFICATIONS_TO_EMAIL or settings.SMTP_USER or settings.SMTP_FROM_EMAIL


class EmailNotifier:
    """Notification sender backed by SMTP."""

    def send(self, destination: str, subject: str, body: str) -> bool:
        return send_email(destination, subject, body)
