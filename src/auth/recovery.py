"""
Password recovery.

Each account moves NoPendingReset -> PendingReset -> NoPendingReset. A reset
token is issued by request_reset(), is valid for exactly one hour, and stops
validating once consume_reset() succeeds or the hour runs out.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from urllib.parse import urlsplit

from src.auth.passwords import hash_password
from src.config import Settings
from src.db.store import ResourceStore, utcnow
from src.errors import InvalidToken, NoSuchAccount, NotifierFailed, PasswordMismatch
from src.models.account import Account
from src.notify.mailer import (
    RESET_DONE_SUBJECT,
    RESET_REQUEST_SUBJECT,
    Notifier,
    reset_done_body,
    reset_request_body,
)

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)
# 20 random bytes, rendered as 40 hex characters
RESET_TOKEN_BYTES = 20


@dataclass
class ResetIssued:
    account: Account
    token: str
    notified: bool


@dataclass
class ResetConsumed:
    account: Account
    notified: bool


class CredentialRecoveryManager:
    """
    Issues, validates and consumes single-use reset tokens.

    Every state change is persisted before the notifier is called, and a
    notifier failure never undoes it.
    """

    def __init__(
        self,
        store: ResourceStore,
        notifier: Notifier,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.settings = settings
        self.clock = clock

    def reset_link(self, token: str, host: Optional[str] = None) -> str:
        # Known gap: the request Host header is trusted, so a forged header redirects the emailed link
        base = urlsplit(self.settings.base_url)
        netloc = host or base.netloc
        return f"{base.scheme}://{netloc}/reset/{token}"

    def _notify(self, to: str, subject: str, body: str) -> bool:
        try:
            self.notifier.send(to, subject, body)
            return True
        except NotifierFailed as e:
            logger.warning(f"Notifier failed for {to}: {e.message}")
            return False

    def request_reset(self, email: str, host: Optional[str] = None) -> ResetIssued:
        """
        Issue a reset token for the account with this email and mail the link.

        Raises:
            NoSuchAccount: If no account has this email
        """
        token = secrets.token_hex(RESET_TOKEN_BYTES)

        account = self.store.find_account_by_email(email)
        if account is None:
            raise NoSuchAccount()

        expires_at = self.clock() + RESET_TOKEN_TTL
        self.store.set_reset_token(account.id, token, expires_at)
        logger.info(f"Reset token issued for account {account.id}, expires {expires_at.isoformat()}")

        notified = self._notify(
            account.email,
            RESET_REQUEST_SUBJECT,
            reset_request_body(self.reset_link(token, host)),
        )
        account = account.model_copy(update={"reset_token": token, "reset_expires_at": expires_at})
        return ResetIssued(account=account, token=token, notified=notified)

    def validate_token(self, token: str) -> Account:
        """
        Return the account holding this token if it has not expired.

        Raises:
            InvalidToken: For unknown, consumed and expired tokens alike
        """
        if not token:
            raise InvalidToken()
        account = self.store.find_account_by_reset_token(token, self.clock())
        if account is None:
            raise InvalidToken()
        return account

    def consume_reset(self, token: str, password: str, confirm: str) -> ResetConsumed:
        """
        Set a new password using a reset token, then clear the token.

        Raises:
            InvalidToken: If the token is not valid now, or a concurrent reset used it first
            PasswordMismatch: If password and confirm differ; the token stays valid
        """
        account = self.validate_token(token)
        if password != confirm:
            raise PasswordMismatch()

        password_hash = hash_password(password)
        if not self.store.consume_reset_token(account.id, token, self.clock(), password_hash):
            raise InvalidToken()
        logger.info(f"Password reset completed for account {account.id}")

        account = account.model_copy(
            update={"password_hash": password_hash, "reset_token": None, "reset_expires_at": None}
        )
        notified = self._notify(account.email, RESET_DONE_SUBJECT, reset_done_body(account.email))
        return ResetConsumed(account=account, notified=notified)
