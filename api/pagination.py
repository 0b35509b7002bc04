"""
Pagination Engine
-----------------
Turns a paginated collection into one lazy async sequence.

Protocol:
1. First page: caller params + count=page_size + _verbosity=1
2. Items are yielded one by one as they are decoded
3. After a page, follow Pages.NextPage (re-signed, verbosity only)
4. Stop when the cursor is absent
5. Stop early when a page is short; the count is known to be exact

Pages are fetched only when the consumer asks for the next item, so
breaking out of ``async for`` never triggers another request.
"""

from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, List, Mapping, Optional, Set, Tuple, TypeVar
import logging

from core.errors import ResponseMissing

if TYPE_CHECKING:
    from .client import ApiClient, Params


T = TypeVar("T")

VERBOSITY_PARAMS: Tuple[Tuple[str, str], ...] = (("_verbosity", "1"),)

logger = logging.getLogger("smugmug.api.pagination")


def _param_list(params: Optional["Params"]) -> List[Tuple[str, Any]]:
    if not params:
        return []
    if isinstance(params, Mapping):
        return list(params.items())
    return list(params)


def first_page_params(params: Optional["Params"], page_size: int) -> List[Tuple[str, Any]]:
    """Query for the first page: caller filters, page size, verbosity."""
    return _param_list(params) + [("count", str(page_size))] + list(VERBOSITY_PARAMS)


def page_items(payload: Any, item_key: str) -> List[Any]:
    """
    Items of one page.

    A payload without ``item_key`` is an empty collection; no payload at
    all is an error.
    """
    if payload is None:
        raise ResponseMissing(f"Page payload missing while reading {item_key!r}")
    if not item_key:
        items = payload
    elif isinstance(payload, Mapping):
        items = payload.get(item_key, [])
    else:
        items = []
    if isinstance(items, Mapping):
        return [items]
    return list(items or [])


async def paged_stream(
    client: "ApiClient",
    first_url: str,
    params: Optional["Params"],
    page_size: int,
    item_key: str,
    decode: Optional[Callable[[Any], T]] = None,
    max_pages: Optional[int] = None,
) -> AsyncIterator[T]:
    """
    Yield every item of a collection, fetching pages on demand.

    Args:
        client: Transport used for every page
        first_url: URL of the first page
        params: Caller filters sent with the first page only
        page_size: Items requested per page
        item_key: Key of the item list inside the Response payload
        decode: Applied to each raw item before it is yielded
        max_pages: Stop after this many pages (None = no cap)
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    url = first_url
    query: List[Tuple[str, Any]] = first_page_params(params, page_size)
    followed: Set[str] = set()
    pages_fetched = 0

    while True:
        response = await client.get(url, params=query)
        pages_fetched += 1
        items = page_items(response.payload, item_key)

        for raw in items:
            yield decode(raw) if decode is not None else raw

        if len(items) < page_size:
            logger.debug(f"Short page ({len(items)}/{page_size}) after {pages_fetched} page(s), done")
            return

        next_page = response.pages.next_page if response.pages else None
        if not next_page:
            return

        if next_page in followed:
            logger.warning(f"Cursor repeated, stopping: {next_page}")
            return
        if max_pages is not None and pages_fetched >= max_pages:
            logger.warning(f"Stopping after max_pages={max_pages}")
            return

        followed.add(next_page)
        # The cursor already carries start/count and the caller's filters
        url = next_page
        query = list(VERBOSITY_PARAMS)
