"""
Pagination Tests
----------------
Tests for the lazy paged stream.

Tests cover:
- Cursor following across pages
- Laziness (no request beyond what the consumer pulls)
- Short-page and absent-cursor termination
- Repeated-cursor and max_pages guards
- Follow-up request parameters
- Errors mid-stream
"""

import asyncio
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from api.pagination import first_page_params, page_items, paged_stream
from core.errors import ConfigurationError, ResponseMissing, TransportError
from infra.config import ClientConfig


COLLECTION = "/api/v2/album/SJT3DX!images"


def collection_server(envelope, total: int, item_key: str = "AlbumImage"):
    """Serves ``total`` items in pages sized by the request's count."""
    def respond(request: httpx.Request) -> httpx.Response:
        start = int(request.url.params.get("start", "1"))
        count = int(request.url.params["count"])
        end = min(start + count - 1, total)
        items = [{"ImageKey": f"img-{i}"} for i in range(start, end + 1)]
        pages = {"Total": total, "Start": start, "Count": len(items), "RequestedCount": count}
        if end < total:
            pages["NextPage"] = f"{COLLECTION}?start={end + 1}&count={count}"
        return envelope({item_key: items}, pages=pages)
    return respond


def collect(client, page_size, limit=None, params=None, item_key="AlbumImage"):
    async def go():
        keys = []
        async with client:
            async for item in client.paged_stream(COLLECTION, params, page_size, item_key):
                keys.append(item["ImageKey"])
                if limit is not None and len(keys) >= limit:
                    break
        return keys
    return asyncio.run(go())


class TestCursorFollowing:
    """Tests for walking a multi-page collection."""

    def test_three_pages(self, make_client, envelope):
        """25 + 25 + 10 items arrive in three requests, in order."""
        client, handler = make_client(collection_server(envelope, total=60))

        keys = collect(client, page_size=25)

        assert keys == [f"img-{i}" for i in range(1, 61)]
        assert len(handler.requests) == 3

    def test_first_request_params(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=3))

        collect(client, page_size=25, params={"SortDirection": "Ascending"})

        params = handler.requests[0].url.params
        assert params["SortDirection"] == "Ascending"
        assert params["count"] == "25"
        assert params["_verbosity"] == "1"

    def test_follow_up_uses_cursor_and_verbosity_only(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=60))

        collect(client, page_size=25, params={"SortDirection": "Ascending"})

        second = handler.requests[1].url
        assert second.path == COLLECTION
        assert dict(second.params) == {"start": "26", "count": "25", "_verbosity": "1"}

    def test_default_page_size_from_config(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=5), config=ClientConfig(page_size=7))

        collect(client, page_size=None)

        assert handler.requests[0].url.params["count"] == "7"

    def test_items_decoded(self, make_client, envelope):
        client, _ = make_client(collection_server(envelope, total=3))

        async def go():
            async with client:
                return [
                    key async for key in client.paged_stream(
                        COLLECTION, None, 10, "AlbumImage", decode=lambda item: item["ImageKey"].upper()
                    )
                ]

        assert asyncio.run(go()) == ["IMG-1", "IMG-2", "IMG-3"]


class TestLaziness:
    """Pages are fetched only when the consumer asks for more."""

    def test_break_after_five_makes_one_request(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=60))

        keys = collect(client, page_size=25, limit=5)

        assert len(keys) == 5
        assert len(handler.requests) == 1

    def test_break_at_page_boundary(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=60))

        collect(client, page_size=25, limit=25)

        assert len(handler.requests) == 1

    def test_nothing_sent_until_iterated(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=60))

        client.paged_stream(COLLECTION, None, 25, "AlbumImage")

        assert handler.requests == []

    def test_item_key_required(self, make_client, envelope):
        client, _ = make_client(collection_server(envelope, total=3))

        with pytest.raises(TypeError):
            client.paged_stream(COLLECTION, None, 25)

    def test_default_page_size_from_config(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=3))

        async def go():
            async with client:
                return [item async for item in client.paged_stream(COLLECTION, None, None, "AlbumImage")]

        assert len(asyncio.run(go())) == 3
        assert handler.requests[0].url.params["count"] == str(client.config.page_size)


class TestTermination:
    """Tests for the stop conditions."""

    def test_short_page_stops_despite_cursor(self, make_client, envelope):
        """A page shorter than requested ends the stream."""
        def respond(request):
            return envelope(
                {"AlbumImage": [{"ImageKey": "a"}]},
                pages={"Total": 100, "NextPage": f"{COLLECTION}?start=2&count=25"},
            )

        client, handler = make_client(respond)

        assert collect(client, page_size=25) == ["a"]
        assert len(handler.requests) == 1

    def test_full_page_without_cursor_stops(self, make_client, envelope):
        def respond(request):
            return envelope({"AlbumImage": [{"ImageKey": str(i)} for i in range(5)]}, pages={"Total": 5})

        client, handler = make_client(respond)

        assert len(collect(client, page_size=5)) == 5
        assert len(handler.requests) == 1

    def test_exact_multiple_needs_one_more_request(self, make_client, envelope):
        """50 items in pages of 25: the empty third page ends the stream."""
        def respond(request):
            start = int(request.url.params.get("start", "1"))
            if start > 50:
                return envelope({"AlbumImage": []}, pages={"Total": 50})
            items = [{"ImageKey": f"img-{i}"} for i in range(start, start + 25)]
            return envelope({"AlbumImage": items}, pages={"NextPage": f"{COLLECTION}?start={start + 25}&count=25"})

        client, handler = make_client(respond)

        assert len(collect(client, page_size=25)) == 50
        assert len(handler.requests) == 3

    def test_repeated_cursor_stops(self, make_client, envelope):
        """A server that keeps returning the same cursor cannot loop us forever."""
        def respond(request):
            items = [{"ImageKey": f"img-{i}"} for i in range(3)]
            return envelope({"AlbumImage": items}, pages={"NextPage": f"{COLLECTION}?start=4&count=3"})

        client, handler = make_client(respond)

        assert len(collect(client, page_size=3)) == 6
        assert len(handler.requests) == 2

    def test_max_pages(self, make_client, envelope):
        client, handler = make_client(
            collection_server(envelope, total=1000), config=ClientConfig(max_pages=2)
        )

        assert len(collect(client, page_size=10)) == 20
        assert len(handler.requests) == 2

    def test_missing_item_key_is_empty(self, make_client, envelope):
        client, _ = make_client(lambda r: envelope({"Uri": COLLECTION}))

        assert collect(client, page_size=25) == []

    def test_missing_payload_raises(self, make_client, envelope):
        client, _ = make_client(lambda r: envelope(code=200))

        with pytest.raises(ResponseMissing):
            collect(client, page_size=25)

    def test_error_mid_stream(self, make_client, envelope):
        """Items already yielded stay delivered; the failure surfaces next."""
        server = collection_server(envelope, total=60)

        def respond(request):
            if "start" in request.url.params:
                return httpx.Response(503)
            return server(request)

        client, _ = make_client(respond)
        received = []

        async def go():
            async with client:
                async for item in client.paged_stream(COLLECTION, None, 25, "AlbumImage"):
                    received.append(item)

        with pytest.raises(TransportError):
            asyncio.run(go())
        assert len(received) == 25


class TestPageSize:
    """Tests for page size validation."""

    def test_zero_page_size_rejected(self, make_client, envelope):
        client, handler = make_client(collection_server(envelope, total=5))

        async def go():
            async for _ in paged_stream(client, COLLECTION, None, 0, "AlbumImage"):
                pass

        with pytest.raises(ValueError):
            asyncio.run(go())
        assert handler.requests == []

    def test_config_rejects_zero(self):
        with pytest.raises(ConfigurationError):
            ClientConfig(page_size=0)


class TestHelpers:
    """Tests for the query and item helpers."""

    def test_first_page_params_from_pairs(self):
        params = first_page_params([("Type", "Album"), ("Type", "Folder")], 10)

        assert params == [("Type", "Album"), ("Type", "Folder"), ("count", "10"), ("_verbosity", "1")]

    def test_page_items_single_object(self):
        assert page_items({"Node": {"NodeID": "x"}}, "Node") == [{"NodeID": "x"}]

    def test_page_items_none(self):
        with pytest.raises(ResponseMissing):
            page_items(None, "Node")
