"""
Registration, login and the session cookie.

The cookie itself is Starlette's signed SessionMiddleware; this module only
decides what goes into it (the account id) and how a principal is rebuilt
from it on each request.
"""

import logging
from typing import Optional

from fastapi import Request

from src.auth.passwords import hash_password, verify_password
from src.config import Settings
from src.db.store import ResourceStore
from src.errors import AuthFailed
from src.models.account import Account, Principal, RegisterForm

logger = logging.getLogger(__name__)

SESSION_KEY = "account_id"


def register(store: ResourceStore, settings: Settings, form: RegisterForm) -> Account:
    """Create an account; a matching signup code makes it an admin."""
    is_admin = bool(settings.admin_code) and form.admin_code == settings.admin_code
    account = store.create_account(
        username=form.username,
        password_hash=hash_password(form.password),
        email=form.email,
        is_admin=is_admin,
        first_name=form.first_name,
        last_name=form.last_name,
        avatar=form.avatar,
    )
    logger.info(f"Account registered: {account.username} ({account.id}) admin={account.is_admin}")
    return account


def authenticate(store: ResourceStore, username: str, password: str) -> Account:
    account = store.find_account_by_username(username)
    if account is None or not verify_password(password, account.password_hash):
        logger.warning(f"Login failed for '{username}'")
        raise AuthFailed()
    return account


def login(request: Request, account: Account) -> Principal:
    request.session.clear()
    request.session[SESSION_KEY] = account.id
    return Principal.from_account(account)


def logout(request: Request) -> None:
    request.session.clear()


def load_principal(request: Request, store: ResourceStore) -> Optional[Principal]:
    account_id = request.session.get(SESSION_KEY)
    if not account_id:
        return None
    account = store.get_account(account_id)
    if account is None:
        # Stale cookie for an account that no longer exists
        request.session.clear()
        return None
    return Principal.from_account(account)
