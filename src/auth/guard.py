"""
Ownership guard.

Every update or delete of a campground or comment passes through authorize()
before the store is touched. Creation-type actions (new campground, new
comment, like toggle) only need require_authenticated().
"""

import logging
from typing import Optional

from src.errors import Forbidden, Unauthenticated
from src.models.account import Principal

logger = logging.getLogger(__name__)


def can_modify(principal: Optional[Principal], author_id: str) -> bool:
    """
    Check whether a principal may change a resource.

    Args:
        principal: The request's principal, or None for anonymous requests
        author_id: Account id recorded as the resource's author

    Returns:
        bool: True for the author or an admin, False otherwise
    """
    if principal is None:
        return False
    return principal.id == author_id or principal.is_admin


def require_authenticated(principal: Optional[Principal]) -> Principal:
    """
    Require a logged-in principal.

    Raises:
        Unauthenticated: If no principal is attached to the request
    """
    if principal is None:
        raise Unauthenticated()
    return principal


def authorize(principal: Optional[Principal], author_id: str) -> None:
    """
    Require that the principal owns the resource or is an admin.

    Raises:
        Unauthenticated: If no principal is attached to the request
        Forbidden: If the principal is neither the author nor an admin
    """
    require_authenticated(principal)
    if not can_modify(principal, author_id):
        logger.info(f"Denied: {principal.username} ({principal.id}) is not author {author_id}")
        raise Forbidden()
