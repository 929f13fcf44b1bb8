"""Cursor pagination over Bitbucket collection endpoints.

Every collection page carries a ``values`` array and, unless it is the
last page, a ``next`` field holding the absolute URL of the following
page. We follow that chain until it ends, but never trust it blindly: a
page URL already visited ends the walk, and so does the fetch ceiling.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, TypeVar

from prgate_core.bitbucket.schemas import Page
from prgate_core.bitbucket.transport import Transport

logger = logging.getLogger(__name__)

# Safety bound on fetches per traversal. No platform limit backs this
# value; it only has to be far above any real pull request's page count.
DEFAULT_MAX_PAGES = 1000

P = TypeVar("P", bound=Page)


def iter_pages(transport: Transport, url: str, page_model: type[P], max_pages: int = DEFAULT_MAX_PAGES) -> Iterator[P]:
    """Yield validated pages starting at ``url``.

    Pages are fetched lazily, so a caller that stops iterating early does
    not pay for the remaining pages. A page that fails validation raises
    and ends the traversal; it is never skipped.
    """
    if max_pages < 1:
        raise ValueError(f"max_pages must be at least 1, got {max_pages}")
    visited: set[str] = set()
    next_url: str | None = url
    for _ in range(max_pages):
        visited.add(next_url)
        page = transport.request_model("GET", next_url, page_model)
        yield page

        if not page.next:
            return
        if page.next in visited:
            logger.warning("Pagination cursor %s points to an already visited page; stopping", page.next)
            return
        next_url = page.next

    logger.warning("Stopped paginating %s after %d pages; results may be incomplete", url, max_pages)


def paginate(transport: Transport, url: str, page_model: type[P], max_pages: int = DEFAULT_MAX_PAGES) -> list[Any]:
    """Return the ``values`` of every page, in page order."""
    items: list[Any] = []
    for page in iter_pages(transport, url, page_model, max_pages):
        items.extend(page.values)
    return items
