import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from src.config import Settings
from src.errors import NotifierFailed

# Get logger
logger = logging.getLogger(__name__)

SMTP_TIMEOUT = 10

RESET_REQUEST_SUBJECT = "Password Reset"
RESET_DONE_SUBJECT = "Your password has been changed"


class Notifier(Protocol):
    def send(self, to: str, subject: str, body: str) -> None:
        """Deliver one message or raise NotifierFailed."""


def reset_request_body(link: str) -> str:
    return (
        "You are receiving this because you (or someone else) have requested the reset of the password for your account.\n\n"
        "Please click on the following link, or paste this into your browser to complete the process:\n\n"
        f"{link}\n\n"
        "If you did not request this, please ignore this email and your password will remain unchanged.\n"
    )


def reset_done_body(email: str) -> str:
    return (
        "Hello,\n\n"
        f"This is a confirmation that the password for your account {email} has just been changed.\n"
    )


class SmtpNotifier:
    """Sends plain-text mail through an authenticated STARTTLS SMTP server."""

    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.mail_from or settings.smtp_user
        self.configured = settings.smtp_configured

    def send(self, to: str, subject: str, body: str) -> None:
        if not self.configured:
            raise NotifierFailed("SMTP is not configured")

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT) as smtp:
                smtp.starttls()
                smtp.login(self.user, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Mail to {to} failed: {e}")
            raise NotifierFailed(str(e)) from e

        logger.info(f"Mail sent to {to}: {subject}")
