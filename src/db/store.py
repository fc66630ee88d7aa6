"""
Resource store over one SQLAlchemy session.

All persistence for accounts, campgrounds, comments and likes goes through
ResourceStore. Driver errors are rolled back, logged and re-raised as
StoreUnavailable so callers never see database detail.
"""
import functools
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.database import AccountDB, CampgroundDB, CampgroundLikeDB, CommentDB
from src.errors import AccountExists, StoreUnavailable
from src.models.account import Account
from src.models.campground import AuthorRef, Campground, Comment

logger = logging.getLogger(__name__)

LIKE_TOGGLE_ATTEMPTS = 3


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return uuid.uuid4().hex


def _store_op(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Store error in {method.__name__}: {e}")
            raise StoreUnavailable() from e
    return wrapper


class ResourceStore:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @_store_op
    def create_account(
        self,
        username: str,
        password_hash: str,
        email: str,
        is_admin: bool = False,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Account:
        row = AccountDB(
            id=new_id(),
            username=username,
            password_hash=password_hash,
            email=email,
            first_name=first_name,
            last_name=last_name,
            avatar=avatar,
            is_admin=is_admin,
            created_at=utcnow(),
        )
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise AccountExists()
        return Account.model_validate(row)

    @_store_op
    def get_account(self, account_id: str) -> Optional[Account]:
        row = self.session.get(AccountDB, account_id)
        return Account.model_validate(row) if row else None

    @_store_op
    def find_account_by_username(self, username: str) -> Optional[Account]:
        row = self.session.scalars(select(AccountDB).where(AccountDB.username == username)).first()
        return Account.model_validate(row) if row else None

    @_store_op
    def find_account_by_email(self, email: str) -> Optional[Account]:
        row = self.session.scalars(select(AccountDB).where(AccountDB.email == email)).first()
        return Account.model_validate(row) if row else None

    @_store_op
    def set_reset_token(self, account_id: str, token: str, expires_at: datetime) -> None:
        self.session.execute(
            update(AccountDB)
            .where(AccountDB.id == account_id)
            .values(reset_token=token, reset_expires_at=expires_at)
        )
        self.session.commit()

    @_store_op
    def find_account_by_reset_token(self, token: str, now: datetime) -> Optional[Account]:
        row = self.session.scalars(
            select(AccountDB).where(
                AccountDB.reset_token == token,
                AccountDB.reset_expires_at > now,
            )
        ).first()
        return Account.model_validate(row) if row else None

    @_store_op
    def consume_reset_token(self, account_id: str, token: str, now: datetime, password_hash: str) -> bool:
        """
        Set a new password hash and clear the reset fields, but only while the
        account still holds this unexpired token. Returns False when another
        caller got there first or the token lapsed in between.
        """
        result = self.session.execute(
            update(AccountDB)
            .where(
                AccountDB.id == account_id,
                AccountDB.reset_token == token,
                AccountDB.reset_expires_at > now,
            )
            .values(password_hash=password_hash, reset_token=None, reset_expires_at=None)
        )
        self.session.commit()
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Campgrounds
    # ------------------------------------------------------------------

    def _likes_for(self, campground_ids: List[str]) -> Dict[str, List[str]]:
        likes = {cid: [] for cid in campground_ids}
        if not campground_ids:
            return likes
        rows = self.session.execute(
            select(CampgroundLikeDB.campground_id, CampgroundLikeDB.account_id)
            .where(CampgroundLikeDB.campground_id.in_(campground_ids))
            .order_by(CampgroundLikeDB.account_id)
        )
        for campground_id, account_id in rows:
            likes[campground_id].append(account_id)
        return likes

    def _campgrounds(self, rows) -> List[Campground]:
        likes = self._likes_for([row.id for row in rows])
        return [
            Campground(
                id=row.id,
                name=row.name,
                image=row.image,
                price=row.price,
                description=row.description,
                author=AuthorRef(id=row.author_id, username=row.author_username),
                location=row.location,
                lat=row.lat,
                lng=row.lng,
                created_at=row.created_at,
                likes=likes[row.id],
            )
            for row in rows
        ]

    @_store_op
    def create_listing(
        self,
        author: AuthorRef,
        name: str,
        image: Optional[str] = None,
        price: Optional[float] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> Campground:
        row = CampgroundDB(
            id=new_id(),
            name=name,
            image=image,
            price=price,
            description=description,
            author_id=author.id,
            author_username=author.username,
            location=location,
            lat=lat,
            lng=lng,
            created_at=utcnow(),
        )
        self.session.add(row)
        self.session.commit()
        return self._campgrounds([row])[0]

    @_store_op
    def get_listing(self, campground_id: str) -> Optional[Campground]:
        row = self.session.get(CampgroundDB, campground_id)
        return self._campgrounds([row])[0] if row else None

    @_store_op
    def update_listing(self, campground_id: str, **fields) -> Optional[Campground]:
        """Update editable fields. The author snapshot is never touched."""
        fields.pop("author_id", None)
        fields.pop("author_username", None)
        row = self.session.get(CampgroundDB, campground_id)
        if row is None:
            return None
        for key, value in fields.items():
            setattr(row, key, value)
        self.session.commit()
        return self._campgrounds([row])[0]

    @_store_op
    def delete_listing(self, campground_id: str) -> bool:
        """Delete a campground and its likes. Its comments are left in place."""
        self.session.execute(delete(CampgroundLikeDB).where(CampgroundLikeDB.campground_id == campground_id))
        result = self.session.execute(delete(CampgroundDB).where(CampgroundDB.id == campground_id))
        self.session.commit()
        return result.rowcount > 0

    @_store_op
    def query_listings(self, pattern: Optional[str], offset: int, limit: int) -> Tuple[List[Campground], int]:
        """Return one window of campgrounds plus the size of the whole candidate set."""
        stmt = select(CampgroundDB)
        count_stmt = select(func.count()).select_from(CampgroundDB)
        if pattern is not None:
            condition = CampgroundDB.name.regexp_match(pattern)
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        total = self.session.scalar(count_stmt) or 0
        # Windows past the end are empty; an oversized offset would overflow the driver
        if offset >= total:
            return [], total

        rows = self.session.scalars(
            stmt.order_by(CampgroundDB.created_at, CampgroundDB.id).offset(offset).limit(limit)
        ).all()
        return self._campgrounds(rows), total

    @_store_op
    def listings_by_author(self, author_id: str) -> List[Campground]:
        rows = self.session.scalars(
            select(CampgroundDB)
            .where(CampgroundDB.author_id == author_id)
            .order_by(CampgroundDB.created_at, CampgroundDB.id)
        ).all()
        return self._campgrounds(rows)

    # ------------------------------------------------------------------
    # Likes
    # ------------------------------------------------------------------

    @_store_op
    def toggle_like(self, campground_id: str, account_id: str) -> bool:
        """
        Flip one account's membership in a campground's like set.
        Returns True if the account now likes the campground.
        """
        for attempt in range(1, LIKE_TOGGLE_ATTEMPTS + 1):
            removed = self.session.execute(
                delete(CampgroundLikeDB).where(
                    CampgroundLikeDB.campground_id == campground_id,
                    CampgroundLikeDB.account_id == account_id,
                )
            ).rowcount
            if removed:
                self.session.commit()
                return False
            try:
                self.session.execute(
                    insert(CampgroundLikeDB).values(campground_id=campground_id, account_id=account_id)
                )
                self.session.commit()
                return True
            except IntegrityError:
                # A concurrent toggle inserted the row first; flip it back instead
                self.session.rollback()
                logger.info(f"Like toggle conflict on {campground_id}, retrying (attempt {attempt}/{LIKE_TOGGLE_ATTEMPTS})")
        raise StoreUnavailable()

    @_store_op
    def like_ids(self, campground_id: str) -> List[str]:
        return self._likes_for([campground_id])[campground_id]

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    @staticmethod
    def _comment(row: CommentDB) -> Comment:
        return Comment(
            id=row.id,
            campground_id=row.campground_id,
            text=row.text,
            author=AuthorRef(id=row.author_id, username=row.author_username),
            created_at=row.created_at,
        )

    @_store_op
    def create_comment(self, campground_id: str, author: AuthorRef, text: str) -> Comment:
        row = CommentDB(
            id=new_id(),
            campground_id=campground_id,
            text=text,
            author_id=author.id,
            author_username=author.username,
            created_at=utcnow(),
        )
        self.session.add(row)
        self.session.commit()
        return self._comment(row)

    @_store_op
    def get_comment(self, comment_id: str) -> Optional[Comment]:
        row = self.session.get(CommentDB, comment_id)
        return self._comment(row) if row else None

    @_store_op
    def update_comment(self, comment_id: str, text: str) -> Optional[Comment]:
        row = self.session.get(CommentDB, comment_id)
        if row is None:
            return None
        row.text = text
        self.session.commit()
        return self._comment(row)

    @_store_op
    def delete_comment(self, comment_id: str) -> bool:
        result = self.session.execute(delete(CommentDB).where(CommentDB.id == comment_id))
        self.session.commit()
        return result.rowcount > 0

    @_store_op
    def comments_for(self, campground_id: str) -> List[Comment]:
        rows = self.session.scalars(
            select(CommentDB)
            .where(CommentDB.campground_id == campground_id)
            .order_by(CommentDB.created_at, CommentDB.id)
        ).all()
        return [self._comment(row) for row in rows]
