import smtplib
from unittest.mock import MagicMock

import pytest

from src.config import Settings
from src.errors import NotifierFailed
from src.notify import mailer

CONFIGURED = Settings(smtp_user="camp@example.com", smtp_password="app-password")


def test_unconfigured_smtp_fails():
    with pytest.raises(NotifierFailed):
        mailer.SmtpNotifier(Settings()).send("alice@example.com", "Hi", "Body")


def test_sends_through_starttls(monkeypatch):
    smtp = MagicMock()
    smtp_class = MagicMock(return_value=smtp)
    smtp.__enter__.return_value = smtp
    monkeypatch.setattr(mailer.smtplib, "SMTP", smtp_class)

    mailer.SmtpNotifier(CONFIGURED).send("alice@example.com", "Password Reset", "Body text")

    smtp_class.assert_called_once_with("smtp.gmail.com", 587, timeout=mailer.SMTP_TIMEOUT)
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("camp@example.com", "app-password")
    message = smtp.send_message.call_args[0][0]
    assert message["To"] == "alice@example.com"
    assert message["From"] == "camp@example.com"
    assert message["Subject"] == "Password Reset"


def test_smtp_errors_become_notifier_failed(monkeypatch):
    smtp = MagicMock()
    smtp.__enter__.return_value = smtp
    smtp.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
    monkeypatch.setattr(mailer.smtplib, "SMTP", MagicMock(return_value=smtp))

    with pytest.raises(NotifierFailed):
        mailer.SmtpNotifier(CONFIGURED).send("alice@example.com", "Hi", "Body")


def test_message_bodies():
    assert "http://yelpcamp.test/reset/abc" in mailer.reset_request_body("http://yelpcamp.test/reset/abc")
    assert "alice@example.com has just been changed" in mailer.reset_done_body("alice@example.com")
