import re

import pytest

from src.models.campground import AuthorRef
from src.services.query import (
    NO_MATCH_MESSAGE,
    PAGE_SIZE,
    escape_regex,
    normalize_page,
    query_listings,
    search_pattern,
)

AUTHOR = AuthorRef(id="author-1", username="alice")


def add(store, *names):
    return [store.create_listing(author=AUTHOR, name=name, price=10.0) for name in names]


@pytest.mark.parametrize("char", list("-[]{}()*+?.,\\^$|#"))
def test_escape_regex_escapes_every_metacharacter(char):
    assert escape_regex(char) == "\\" + char


def test_escape_regex_escapes_whitespace_and_keeps_letters():
    assert escape_regex("a b\tc") == "a\\ b\\\tc"
    assert escape_regex("Yosemite 42") == "Yosemite\\ 42"


def test_search_pattern_is_literal_and_case_insensitive():
    pattern = search_pattern("a.b")
    assert re.search(pattern, "A.B Ranch")
    assert re.search(pattern, "axb creek") is None
    assert re.search(search_pattern("(camp)*"), "the (camp)* site")
    assert re.search(search_pattern("(camp)*"), "camp") is None


@pytest.mark.parametrize("raw, expected", [
    (None, 1), ("", 1), ("abc", 1), (0, 1), ("0", 1), (-3, 1), ("2", 2), (5, 5),
])
def test_normalize_page(raw, expected):
    assert normalize_page(raw) == expected


def test_search_treats_dot_literally(store):
    add(store, "a.b ranch", "axb creek")
    page = query_listings(store, search="a.b")
    assert [c.name for c in page.items] == ["a.b ranch"]
    assert page.total_pages == 1
    assert page.no_match is None


def test_search_is_case_insensitive_substring(store):
    add(store, "Granite Hill", "Salmon Creek", "Lake Granite")
    page = query_listings(store, search="GRANITE")
    assert sorted(c.name for c in page.items) == ["Granite Hill", "Lake Granite"]


def test_search_with_pattern_syntax_does_not_match_everything(store):
    add(store, "Granite Hill", "Salmon Creek")
    page = query_listings(store, search=".*")
    assert page.items == []
    assert page.total_pages == 0
    assert page.no_match == NO_MATCH_MESSAGE


def test_empty_collection_without_search_has_no_no_match_flag(store):
    page = query_listings(store)
    assert page.items == []
    assert page.current_page == 1
    assert page.total_pages == 0
    assert page.no_match is None


def test_pagination_of_seventeen_listings(store):
    add(store, *[f"Camp {i:02d}" for i in range(17)])

    first = query_listings(store, page=1)
    second = query_listings(store, page=2)
    third = query_listings(store, page=3)

    assert PAGE_SIZE == 8
    assert len(first.items) == 8
    assert len(second.items) == 8
    assert len(third.items) == 1
    assert third.total_pages == 3
    assert third.current_page == 3

    seen = [c.id for c in first.items + second.items + third.items]
    assert len(set(seen)) == 17


@pytest.mark.parametrize("page", [None, 0, "0", -1, "nope"])
def test_bad_page_defaults_to_first_page(store, page):
    add(store, *[f"Camp {i:02d}" for i in range(17)])
    result = query_listings(store, page=page)
    assert result.current_page == 1
    assert [c.id for c in result.items] == [c.id for c in query_listings(store, page=1).items]


def test_page_past_the_end_is_empty(store):
    add(store, "Only Camp")
    result = query_listings(store, page=4)
    assert result.items == []
    assert result.total_pages == 1
    assert result.no_match is None


def test_huge_page_number_is_an_empty_page(store):
    add(store, "Only Camp")
    result = query_listings(store, page=str(10 ** 30))
    assert result.items == []
    assert result.current_page == 10 ** 30
    assert result.total_pages == 1


def test_total_pages_counts_only_matching_listings(store):
    add(store, *[f"Lake {i}" for i in range(10)])
    add(store, "River Bend", "Riverside", "Upper River")
    page = query_listings(store, search="river")
    assert len(page.items) == 3
    assert page.total_pages == 1
