import pytest

import main
from src.config import MissingSetting, Settings


def test_from_env_requires_session_secret(monkeypatch):
    monkeypatch.delenv("SESSION_SECRET", raising=False)
    with pytest.raises(MissingSetting):
        Settings.from_env()


def test_from_env_rejects_empty_session_secret(monkeypatch):
    monkeypatch.setenv("SESSION_SECRET", "")
    with pytest.raises(MissingSetting):
        Settings.from_env()


def test_from_env_reads_environment(monkeypatch):
    monkeypatch.setenv("SESSION_SECRET", "s3cret")
    monkeypatch.setenv("ADMIN_CODE", "SilverFreak")
    monkeypatch.setenv("SMTP_USER", "camp@example.com")
    monkeypatch.delenv("SMTP_PASSWORD", raising=False)
    monkeypatch.setenv("GMAILPW", "app-password")

    settings = Settings.from_env()

    assert settings.session_secret == "s3cret"
    assert settings.admin_code == "SilverFreak"
    assert settings.smtp_password == "app-password"
    assert settings.mail_from == "camp@example.com"
    assert settings.smtp_configured


def test_main_exits_with_error_without_session_secret(monkeypatch):
    monkeypatch.delenv("SESSION_SECRET", raising=False)

    def fail_if_started(*args, **kwargs):
        raise AssertionError("server should not start")

    monkeypatch.setattr(main.uvicorn, "run", fail_if_started)
    assert main.main() == 1
