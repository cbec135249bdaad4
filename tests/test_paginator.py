"""Tests for cursor-based pagination."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import pytest

from core.domain.errors import IncompleteListingError, RemoteFetchError
from core.interfaces.ledger import Page
from core.services.paginator import fetch_all


@dataclass(frozen=True)
class Item:
    id: str


class ScriptedRemote:
    """Serves `total` items newest-first, honoring the cursor and page size."""

    def __init__(self, total: int, *, fail_on_page: int | None = None) -> None:
        self.items = [Item(f"it_{i:04d}") for i in range(total)]
        self.fail_on_page = fail_on_page
        self.requests: list[tuple[str | None, int]] = []

    async def __call__(self, cursor: str | None, size: int) -> Page[Item]:
        self.requests.append((cursor, size))
        if self.fail_on_page is not None and len(self.requests) == self.fail_on_page:
            raise RemoteFetchError("boom", status_code=500)
        start = 0
        if cursor is not None:
            start = [item.id for item in self.items].index(cursor) + 1
        chunk = self.items[start : start + size]
        return Page(data=chunk, has_more=start + size < len(self.items))


@pytest.mark.parametrize(
    ("total", "limit", "expected"),
    [
        (0, None, 0),
        (5, None, 5),
        (250, None, 250),
        (250, 120, 120),
        (30, 100, 30),
        (100, 100, 100),
        (101, 100, 100),
    ],
)
def test_fetch_all_returns_min_of_limit_and_available(total, limit, expected):
    remote = ScriptedRemote(total)

    items = asyncio.run(fetch_all(remote, limit=limit))

    assert len(items) == expected
    assert items == remote.items[:expected]
    assert len({item.id for item in items}) == len(items)


def test_fetch_all_passes_last_seen_id_as_cursor():
    remote = ScriptedRemote(250)

    asyncio.run(fetch_all(remote))

    assert remote.requests == [(None, 100), ("it_0099", 100), ("it_0199", 100)]


def test_fetch_all_shrinks_last_page_to_remaining_limit():
    remote = ScriptedRemote(500)

    asyncio.run(fetch_all(remote, limit=130))

    assert remote.requests == [(None, 100), ("it_0099", 30)]


def test_empty_page_before_has_more_false_stops_without_error():
    calls = []

    async def stalled(cursor, size):
        calls.append(cursor)
        if cursor is None:
            return Page(data=[Item("a"), Item("b")], has_more=True)
        return Page(data=[], has_more=True)

    items = asyncio.run(fetch_all(stalled))

    assert [item.id for item in items] == ["a", "b"]
    assert calls == [None, "b"]


def test_page_ceiling_logs_warning_and_returns_collected(caplog):
    remote = ScriptedRemote(50)

    with caplog.at_level(logging.WARNING):
        items = asyncio.run(fetch_all(remote, page_size=10, max_pages=3))

    assert len(items) == 30
    assert "Reached max pages (3)" in caplog.text


def test_duplicate_ids_across_pages_are_dropped():
    async def overlapping(cursor, size):
        if cursor is None:
            return Page(data=[Item("a"), Item("b")], has_more=True)
        return Page(data=[Item("b"), Item("c")], has_more=False)

    items = asyncio.run(fetch_all(overlapping))

    assert [item.id for item in items] == ["a", "b", "c"]


def test_remote_error_returns_partial_results(caplog):
    remote = ScriptedRemote(300, fail_on_page=2)

    with caplog.at_level(logging.ERROR):
        items = asyncio.run(fetch_all(remote))

    assert len(items) == 100
    assert "Error fetching page 2" in caplog.text


def test_remote_error_propagates_in_strict_mode():
    remote = ScriptedRemote(300, fail_on_page=2)

    with pytest.raises(RemoteFetchError):
        asyncio.run(fetch_all(remote, strict=True))


def test_non_positive_limit_fetches_nothing():
    remote = ScriptedRemote(10)

    assert asyncio.run(fetch_all(remote, limit=0)) == []
    assert remote.requests == []


def test_page_ceiling_raises_in_strict_mode():
    remote = ScriptedRemote(50)

    with pytest.raises(IncompleteListingError, match="Reached max pages \\(3\\)"):
        asyncio.run(fetch_all(remote, page_size=10, max_pages=3, strict=True))


def test_strict_walk_that_ends_on_the_last_allowed_page_succeeds():
    remote = ScriptedRemote(30)

    items = asyncio.run(fetch_all(remote, page_size=10, max_pages=3, strict=True))

    assert len(items) == 30
