"""Cursor-based pagination over remote ledger collections.

The ledger returns collections newest-first in pages of at most 100 items and
expects the ID of the last item seen as the cursor for the next page. This
module walks such a collection until it is exhausted or one of the ceilings
is hit, without knowing which collection it is walking.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Protocol, TypeVar

from core.domain.errors import IncompleteListingError, RemoteFetchError
from core.interfaces.ledger import Page
from core.logging_setup import get_logger

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 100


class HasId(Protocol):
    @property
    def id(self) -> str: ...


ItemT = TypeVar("ItemT", bound=HasId)

FetchPage = Callable[[str | None, int], Awaitable[Page[ItemT]]]


async def fetch_all(
    fetch_page: FetchPage[ItemT],
    *,
    limit: int | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_pages: int = DEFAULT_MAX_PAGES,
    strict: bool = False,
    logger: logging.Logger | None = None,
) -> list[ItemT]:
    """Collect every item of a paged collection, in the order received.

    ``fetch_page(cursor, size)`` is called with ``cursor=None`` first and then
    with the ID of the last item of the previous page.

    Stops on ``has_more=False``, once ``limit`` items were collected, after
    ``max_pages`` pages (with a warning), or on an empty page. Items whose ID
    was already collected are dropped.

    A ``RemoteFetchError`` ends the walk and the partial result is returned,
    unless ``strict`` is set, in which case it propagates. In strict mode the
    page ceiling raises ``IncompleteListingError`` instead of truncating.
    """

    log = logger or get_logger(__name__)
    if limit is not None and limit <= 0:
        return []

    items: list[ItemT] = []
    seen: set[str] = set()
    cursor: str | None = None
    pages = 0
    has_more = True

    while has_more and pages < max_pages:
        remaining = page_size if limit is None else min(page_size, limit - len(items))
        pages += 1
        log.debug("Fetching page %d (cursor=%s, size=%d)", pages, cursor, remaining)
        try:
            page = await fetch_page(cursor, remaining)
        except RemoteFetchError as exc:
            if strict:
                raise
            log.error("Error fetching page %d: %s", pages, exc)
            return items

        log.debug("Received %d items, has_more: %s", len(page.data), page.has_more)
        if not page.data:
            log.debug("Empty page received, stopping.")
            break

        for item in page.data:
            if item.id in seen:
                continue
            seen.add(item.id)
            items.append(item)
            if limit is not None and len(items) >= limit:
                break

        cursor = page.data[-1].id
        has_more = page.has_more and (limit is None or len(items) < limit)

    if has_more and pages >= max_pages:
        if strict:
            raise IncompleteListingError(f"Reached max pages ({max_pages}) with more data available")
        log.warning("Reached max pages (%d). More data may be available.", max_pages)
    log.debug("Total items fetched: %d", len(items))
    return items
