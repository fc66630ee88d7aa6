"""
Application settings, read once from the environment at process start and
passed explicitly into the app factory and the services that need them.
"""
import os
from typing import Optional

from pydantic import BaseModel

DEFAULT_DATABASE_URL = "sqlite:///./yelpcamp.db"


class MissingSetting(ValueError):
    pass


class Settings(BaseModel):
    database_url: str = DEFAULT_DATABASE_URL
    session_secret: str = "dev-only-secret"
    # Signup code that grants is_admin at registration
    admin_code: Optional[str] = None
    # Used to build recovery links when no request host is available
    base_url: str = "http://localhost:3000"

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    mail_from: Optional[str] = None

    geocoder_user_agent: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    @classmethod
    def from_env(cls) -> "Settings":
        session_secret = os.getenv("SESSION_SECRET")
        if not session_secret:
            raise MissingSetting("SESSION_SECRET must be set to sign session cookies")

        return cls(
            database_url=os.getenv("DB_URL", DEFAULT_DATABASE_URL),
            session_secret=session_secret,
            admin_code=os.getenv("ADMIN_CODE") or None,
            base_url=os.getenv("BASE_URL", "http://localhost:3000"),
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_user=os.getenv("SMTP_USER") or None,
            smtp_password=os.getenv("SMTP_PASSWORD") or os.getenv("GMAILPW") or None,
            mail_from=os.getenv("MAIL_FROM") or os.getenv("SMTP_USER") or None,
            geocoder_user_agent=os.getenv("GEOCODER_USER_AGENT") or None,
        )
