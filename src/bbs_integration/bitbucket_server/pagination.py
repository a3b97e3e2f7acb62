"""Pagination helpers for the Bitbucket Server paged-response envelope.

Bitbucket Server pages with ``start``/``limit`` query parameters and answers
with ``{isLastPage, limit, size, start, nextPageStart, values}``.
"""

import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, TypeVar

from ..models.bitbucket_server import Paginated

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 100
DEFAULT_MAX_PAGES = 50


async def paginate_start(
    fetch_page: Callable[[Dict[str, Any]], Awaitable[Paginated[T]]],
    *,
    limit: int = DEFAULT_PAGE_LIMIT,
    max_pages: int = DEFAULT_MAX_PAGES,
) -> AsyncIterator[Paginated[T]]:
    """Yield pages until ``isLastPage`` is set.

    Every iteration starts again from ``start=0``, so the generator can be
    recreated to restart a listing.

    Args:
        fetch_page: Async callable(params: dict) -> Paginated page.
        limit: Page size requested from the server.
        max_pages: Safety limit on total pages fetched.
    """
    start = 0
    for _ in range(max_pages):
        page = await fetch_page({"start": start, "limit": limit})
        yield page

        if page.is_last_page or page.next_page_start is None:
            return
        if page.next_page_start <= start:
            logger.warning("Server returned non-advancing nextPageStart=%d", page.next_page_start)
            return
        start = page.next_page_start

    logger.warning("paginate_start hit max_pages=%d", max_pages)


async def iterate_values(pages: AsyncIterator[Paginated[T]]) -> AsyncIterator[T]:
    """Flatten an async iterator of pages into its values."""
    async for page in pages:
        for value in page.values:
            yield value


async def collect_all_values(
    pages: AsyncIterator[Paginated[T]],
    max_items: int = 10_000,
) -> List[T]:
    """Collect every value of every page into a list.

    Args:
        pages: An async iterator yielding pages.
        max_items: Safety cap on total items collected.
    """
    items: List[T] = []
    async for value in iterate_values(pages):
        items.append(value)
        if len(items) >= max_items:
            logger.warning("collect_all_values hit max_items=%d", max_items)
            break
    return items
