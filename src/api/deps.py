"""FastAPI dependencies: per-request store, principal and recovery manager."""
from typing import Iterator, Optional

from fastapi import Depends, Request

from src.auth.recovery import CredentialRecoveryManager
from src.auth.session import load_principal
from src.db.store import ResourceStore
from src.models.account import Principal


def get_store(request: Request) -> Iterator[ResourceStore]:
    db = request.app.state.session_factory()
    try:
        yield ResourceStore(db)
    finally:
        db.close()


def get_principal(request: Request, store: ResourceStore = Depends(get_store)) -> Optional[Principal]:
    """Principal for this request, or None for anonymous visitors"""
    return load_principal(request, store)


def get_recovery(request: Request, store: ResourceStore = Depends(get_store)) -> CredentialRecoveryManager:
    state = request.app.state
    return CredentialRecoveryManager(store, state.notifier, state.settings, clock=state.clock)
