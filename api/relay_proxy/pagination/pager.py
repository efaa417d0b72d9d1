"""Forward-only connections over fixed size upstream pages.

The upstream API only supports ``page=n&pageSize=m`` and never reports a total
count, so a connection cannot be sliced out of a known list. Instead every item
is given a cursor made of the page it was read from and its absolute offset in
the iteration. Resuming from a cursor re-reads that page and skips forward to
the offset. Cursors stay stable only while the page size stays fixed.
"""

import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

from .connection import Connection, Edge, PageInfo, PagedResult, empty_connection
from .cursor import CursorPosition, decode_cursor, encode_cursor
from ..errors.problem_details import InvalidArgumentError


logger = logging.getLogger(__name__)

PageReader = Callable[[int], Union[PagedResult, Awaitable[PagedResult]]]


async def _read(read_page: PageReader, page_number: int) -> PagedResult:
    result = read_page(page_number)
    if inspect.isawaitable(result):
        result = await result
    return result


async def get_connection(
    read_page: PageReader,
    first: int,
    page_size: int,
    after: Optional[str] = None
) -> Connection:
    """Build a connection of at most ``first`` items following ``after``.

    Args:
        read_page: Callable returning the zero based upstream page as a
            PagedResult, or an awaitable of one
        first: Number of items requested
        page_size: The fixed number of items ``read_page`` returns for every
            page but the last
        after: Exclusive cursor to continue from, or None to start at the
            beginning

    Returns:
        The connection of edges and its page info. ``has_next_page`` is true
        while the upstream claims more pages or when items already read were
        cut off by ``first``

    Raises:
        InvalidArgumentError: If first is negative or page_size is not positive
        InvalidCursorError: If after cannot be decoded
        UpstreamFetchError: Propagated from read_page, no partial
            connection is returned
    """
    if first < 0:
        raise InvalidArgumentError("You must provide a non-negative value for 'first'", first=first)
    if page_size < 1:
        raise InvalidArgumentError("Page size must be a positive integer", page_size=page_size)

    after_present = after is not None
    desired = decode_cursor(after) if after_present else CursorPosition(page=0, offset=0)
    if first == 0:
        return empty_connection()

    # The 'after' edge is read again to find our place and sliced away later
    needed = first + (1 if after_present else 0)

    edges: List[Edge] = []
    collecting = False
    backend_exhausted = False
    page = desired.page
    offset = page * page_size
    pages_read = 0

    while len(edges) < needed:
        result = await _read(read_page, page)
        pages_read += 1
        logger.debug(
            f"Read page {page} with {len(result.items)} items",
            extra={"page": page, "page_size": page_size, "has_next_page": result.has_next_page}
        )

        for item in result.items:
            if offset == desired.offset:
                collecting = True
            if collecting:
                edges.append(Edge(node=item, cursor=encode_cursor(page, offset)))
            offset += 1

        page += 1
        # An empty page ends the iteration even if the upstream claims more
        if not result.has_next_page or not result.items:
            backend_exhausted = True
            break

    if after_present and not collecting and pages_read:
        logger.warning(
            f"Cursor offset {desired.offset} on page {desired.page} was not found "
            f"after reading {pages_read} pages",
            extra={"page": desired.page, "offset": desired.offset}
        )

    if not edges:
        return empty_connection()

    # 'after' cursors are exclusive
    start = 1 if after_present else 0
    sliced = edges[start:start + first]
    if not sliced:
        return empty_connection()

    # Edges read but cut off by the window are still ahead of the cursor
    has_next_page = not backend_exhausted or len(edges) > start + first

    return Connection(
        edges=sliced,
        page_info=PageInfo(
            start_cursor=sliced[0].cursor,
            end_cursor=sliced[-1].cursor,
            has_previous_page=False,
            has_next_page=has_next_page
        )
    )
