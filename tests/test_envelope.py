"""
Envelope Tests
--------------
Tests for decoding the {Code, Message, Response} wrapper.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from api.envelope import ApiStatus, Envelope, Pages, SUCCESS_CODES
from core.errors import MalformedResponse


def raw(body) -> bytes:
    return json.dumps(body).encode("utf-8")


class TestApiStatus:
    """Tests for the closed status-code set."""

    @pytest.mark.parametrize("code", [200, 201, 202, 301, 302])
    def test_success_codes(self, code):
        assert ApiStatus.lookup(code).is_success

    @pytest.mark.parametrize("code", [400, 401, 402, 403, 404, 405, 406, 407, 429, 500, 503])
    def test_failure_codes(self, code):
        status = ApiStatus.lookup(code)
        assert status is not None
        assert not status.is_success

    @pytest.mark.parametrize("code", [0, 204, 418, 502, 999])
    def test_unknown_codes(self, code):
        assert ApiStatus.lookup(code) is None

    def test_success_set(self):
        assert len(SUCCESS_CODES) == 5


class TestParse:
    """Tests for Envelope.parse."""

    def test_full_envelope(self):
        envelope = Envelope.parse(raw({"Code": 200, "Message": "Ok", "Response": {"User": {}}}))

        assert envelope.code == 200
        assert envelope.message == "Ok"
        assert envelope.payload == {"User": {}}
        assert envelope.status is ApiStatus.OK
        assert envelope.pages is None

    def test_no_response(self):
        envelope = Envelope.parse(raw({"Code": 404, "Message": "Not Found"}))

        assert envelope.payload is None
        assert envelope.status is ApiStatus.NOT_FOUND

    def test_unknown_code_kept(self):
        envelope = Envelope.parse(raw({"Code": 999, "Message": "?"}))

        assert envelope.code == 999
        assert envelope.status is None

    def test_message_optional(self):
        assert Envelope.parse(raw({"Code": 200})).message == ""

    @pytest.mark.parametrize("body", [
        b"",
        b"not json",
        b"\xff\xfe",
        raw([1, 2, 3]),
        raw("Ok"),
        raw({"Message": "Ok"}),
        raw({"Code": "200", "Message": "Ok"}),
        raw({"Code": True, "Message": "Ok"}),
        raw({"Code": 200, "Message": 5}),
    ])
    def test_malformed(self, body):
        with pytest.raises(MalformedResponse) as exc_info:
            Envelope.parse(body)

        assert exc_info.value.raw == body


class TestPages:
    """Tests for reading the paging block."""

    def test_pages_inside_response(self):
        envelope = Envelope.parse(raw({
            "Code": 200,
            "Message": "Ok",
            "Response": {
                "Node": [],
                "Pages": {"Total": 60, "Start": 1, "Count": 25, "RequestedCount": 25,
                          "NextPage": "/api/v2/node/x!children?start=26&count=25"},
            },
        }))

        assert envelope.pages == Pages(
            total=60, start=1, count=25, requested_count=25,
            next_page="/api/v2/node/x!children?start=26&count=25",
        )

    def test_pages_at_top_level(self):
        envelope = Envelope.parse(raw({
            "Code": 200,
            "Message": "Ok",
            "Response": {"Node": []},
            "Pages": {"Total": 1, "NextPage": "/next"},
        }))

        assert envelope.pages.next_page == "/next"

    def test_empty_next_page_is_none(self):
        pages = Pages.from_api({"Total": 10, "NextPage": ""})

        assert pages.next_page is None
