"""Paginated, name-searchable campground listing."""
import math
import re
from typing import Optional, Union

from src.db.store import ResourceStore
from src.models.campground import CampgroundPage

PAGE_SIZE = 8
NO_MATCH_MESSAGE = "No campgrounds match that query, please try again."

_REGEX_SPECIALS = re.compile(r"[-\[\]{}()*+?.,\\^$|#\s]")


def escape_regex(text: str) -> str:
    """Backslash-escape every regex metacharacter and whitespace so the term matches literally."""
    return _REGEX_SPECIALS.sub(lambda m: "\\" + m.group(0), text)


def search_pattern(term: str) -> str:
    """Case-insensitive literal substring pattern for a search term."""
    return "(?i)" + escape_regex(term)


def normalize_page(raw: Union[int, str, None]) -> int:
    """Missing, unparsable or non-positive page numbers all mean page 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def query_listings(
    store: ResourceStore,
    search: Optional[str] = None,
    page: Union[int, str, None] = 1,
    page_size: int = PAGE_SIZE,
) -> CampgroundPage:
    page = normalize_page(page)
    term = search if search else None
    pattern = search_pattern(term) if term is not None else None

    offset = (page - 1) * page_size
    items, total = store.query_listings(pattern, offset, page_size)

    no_match = None
    if term is not None and not items:
        no_match = NO_MATCH_MESSAGE

    return CampgroundPage(
        items=items,
        current_page=page,
        total_pages=math.ceil(total / page_size),
        no_match=no_match,
    )
