"""
Campground and comment mutations.

The ownership guard runs before every update and delete; create actions only
require a logged-in principal. Author snapshots are taken from the principal at
creation time.
"""
import logging
from typing import Callable, Optional

from src.auth.guard import authorize, require_authenticated
from src.db.store import ResourceStore
from src.errors import NotFound
from src.geocoding.nominatim import ResolvedAddress
from src.models.account import Principal
from src.models.campground import AuthorRef, Campground, CampgroundForm, Comment, CommentForm

logger = logging.getLogger(__name__)

Resolver = Callable[[str], ResolvedAddress]


def _get_campground(store: ResourceStore, campground_id: str) -> Campground:
    campground = store.get_listing(campground_id)
    if campground is None:
        raise NotFound("Campground not found!")
    return campground


def _get_comment(store: ResourceStore, campground_id: str, comment_id: str) -> Comment:
    comment = store.get_comment(comment_id)
    if comment is None or comment.campground_id != campground_id:
        raise NotFound("Comment not found!")
    return comment


def create_campground(
    store: ResourceStore,
    resolver: Resolver,
    principal: Optional[Principal],
    form: CampgroundForm,
) -> Campground:
    principal = require_authenticated(principal)
    place = resolver(form.location)
    campground = store.create_listing(
        author=AuthorRef(id=principal.id, username=principal.username),
        name=form.name,
        image=form.image,
        price=form.price,
        description=form.description,
        location=place.formatted_address,
        lat=place.lat,
        lng=place.lng,
    )
    logger.info(f"Campground created: {campground.name} ({campground.id}) by {principal.username}")
    return campground


def update_campground(
    store: ResourceStore,
    resolver: Resolver,
    principal: Optional[Principal],
    campground_id: str,
    form: CampgroundForm,
) -> Campground:
    require_authenticated(principal)
    campground = _get_campground(store, campground_id)
    authorize(principal, campground.author.id)

    place = resolver(form.location)
    updated = store.update_listing(
        campground_id,
        name=form.name,
        image=form.image,
        price=form.price,
        description=form.description,
        location=place.formatted_address,
        lat=place.lat,
        lng=place.lng,
    )
    if updated is None:
        raise NotFound("Campground not found!")
    return updated


def delete_campground(store: ResourceStore, principal: Optional[Principal], campground_id: str) -> None:
    require_authenticated(principal)
    campground = _get_campground(store, campground_id)
    authorize(principal, campground.author.id)
    store.delete_listing(campground_id)
    logger.info(f"Campground deleted: {campground_id} by {principal.username}")


def create_comment(
    store: ResourceStore,
    principal: Optional[Principal],
    campground_id: str,
    form: CommentForm,
) -> Comment:
    principal = require_authenticated(principal)
    _get_campground(store, campground_id)
    return store.create_comment(
        campground_id,
        AuthorRef(id=principal.id, username=principal.username),
        form.text,
    )


def update_comment(
    store: ResourceStore,
    principal: Optional[Principal],
    campground_id: str,
    comment_id: str,
    form: CommentForm,
) -> Comment:
    require_authenticated(principal)
    comment = _get_comment(store, campground_id, comment_id)
    authorize(principal, comment.author.id)
    updated = store.update_comment(comment_id, form.text)
    if updated is None:
        raise NotFound("Comment not found!")
    return updated


def delete_comment(
    store: ResourceStore,
    principal: Optional[Principal],
    campground_id: str,
    comment_id: str,
) -> None:
    require_authenticated(principal)
    comment = _get_comment(store, campground_id, comment_id)
    authorize(principal, comment.author.id)
    store.delete_comment(comment_id)
