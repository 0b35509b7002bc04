"""
Fetch Helpers
-------------
Generic fetch-by-url, fetch-by-ids and stream-children operations shared
by every resource type.

A resource only declares where it lives and how to build itself:

    @dataclass
    class Album(ApiObject):
        BASE_URI = "/api/v2/album/"
        RESPONSE_KEY = "Album"

        @classmethod
        def from_api(cls, data, client): ...
"""

from typing import TYPE_CHECKING, Any, AsyncIterator, Callable, ClassVar, Dict, List, Optional, Sequence, Type, TypeVar

from core.errors import ResponseMissing
from .pagination import VERBOSITY_PARAMS, page_items

if TYPE_CHECKING:
    from .client import ApiClient, Params


T = TypeVar("T")
O = TypeVar("O", bound="ApiObject")


async def fetch_object(
    client: "ApiClient",
    url: str,
    key: str,
    factory: Callable[[Dict[str, Any]], T],
) -> T:
    """Fetch one object stored under ``key`` in the payload."""
    response = await client.get(url, params=VERBOSITY_PARAMS)
    data = response.require_payload().get(key)
    if data is None:
        raise ResponseMissing(f"Expected {key!r} in response")
    return factory(data)


async def fetch_objects(
    client: "ApiClient",
    base_uri: str,
    ids: Sequence[str],
    key: str,
    factory: Callable[[Dict[str, Any]], T],
) -> List[T]:
    """Fetch several objects with one call to the multi-id endpoint."""
    if not ids:
        return []
    url = f"{base_uri}{','.join(ids)}"
    response = await client.get(url, params=VERBOSITY_PARAMS)
    return [factory(item) for item in page_items(response.require_payload(), key)]


async def stream_children(
    client: "ApiClient",
    uri: Optional[str],
    params: Optional["Params"],
    key: str,
    factory: Callable[[Dict[str, Any]], T],
    page_size: Optional[int] = None,
) -> AsyncIterator[T]:
    """Stream a child collection; nothing is yielded when ``uri`` is absent."""
    if not uri:
        return
    async for item in client.paged_stream(uri, params, page_size, key, decode=factory):
        yield item


class ApiObject:
    """
    Base for resources that can be fetched by url, id or id list.

    Subclasses set BASE_URI and RESPONSE_KEY and implement from_api.
    """
    BASE_URI: ClassVar[str] = ""
    RESPONSE_KEY: ClassVar[str] = ""

    @classmethod
    def from_api(cls: Type[O], data: Dict[str, Any], client: "ApiClient") -> O:
        raise NotImplementedError

    @classmethod
    async def from_url(cls: Type[O], client: "ApiClient", url: str) -> O:
        """Returns the object at the provided url."""
        return await fetch_object(client, url, cls.RESPONSE_KEY, lambda d: cls.from_api(d, client))

    @classmethod
    async def from_id(cls: Type[O], client: "ApiClient", object_id: str) -> O:
        """Returns the object with the specified id."""
        return await cls.from_url(client, f"{cls.BASE_URI}{object_id}")

    @classmethod
    async def from_id_slice(cls: Type[O], client: "ApiClient", ids: Sequence[str]) -> List[O]:
        """Returns the objects for the list of ids, in one request."""
        return await fetch_objects(
            client, cls.BASE_URI, ids, cls.RESPONSE_KEY, lambda d: cls.from_api(d, client)
        )
