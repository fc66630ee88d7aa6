import logging
from typing import Optional

from src.auth.guard import require_authenticated
from src.db.store import ResourceStore
from src.errors import NotFound
from src.models.account import Principal
from src.models.campground import Campground

logger = logging.getLogger(__name__)


def toggle_like(store: ResourceStore, principal: Optional[Principal], campground_id: str) -> Campground:
    """Like the campground if the principal hasn't yet, otherwise take the like back."""
    principal = require_authenticated(principal)

    if store.get_listing(campground_id) is None:
        raise NotFound("Campground not found!")

    liked = store.toggle_like(campground_id, principal.id)
    logger.info(f"{principal.username} {'liked' if liked else 'unliked'} campground {campground_id}")

    campground = store.get_listing(campground_id)
    if campground is None:
        # Deleted between the toggle and the re-read
        raise NotFound("Campground not found!")
    return campground
