"""
Response Envelope
-----------------
Every API response is wrapped as::

    {"Code": 200, "Message": "Ok", "Response": {...}}

The payload only counts as present when ``Code`` is a success code,
whatever the HTTP status line said.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional
import json

from core.errors import MalformedResponse


class ApiStatus(IntEnum):
    """Closed set of envelope codes documented by the API."""
    # Good Codes
    OK = 200
    CREATED_SUCCESSFULLY = 201
    ACCEPTED = 202
    MOVED_PERMANENTLY = 301
    MOVED_TEMPORARILY = 302

    # Failing Codes
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    BAD_ACCEPT = 406
    CONFLICT = 407
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503

    @classmethod
    def lookup(cls, code: int) -> Optional["ApiStatus"]:
        """Known status for ``code``, or None when outside the set."""
        try:
            return cls(code)
        except ValueError:
            return None

    @property
    def is_success(self) -> bool:
        return self in SUCCESS_CODES


SUCCESS_CODES = frozenset({
    ApiStatus.OK,
    ApiStatus.CREATED_SUCCESSFULLY,
    ApiStatus.ACCEPTED,
    ApiStatus.MOVED_PERMANENTLY,
    ApiStatus.MOVED_TEMPORARILY,
})


@dataclass(frozen=True)
class Pages:
    """Paging block returned alongside collection payloads."""
    total: Optional[int] = None
    start: Optional[int] = None
    count: Optional[int] = None
    requested_count: Optional[int] = None
    next_page: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Pages":
        return cls(
            total=data.get("Total"),
            start=data.get("Start"),
            count=data.get("Count"),
            requested_count=data.get("RequestedCount"),
            next_page=data.get("NextPage") or None,
        )


@dataclass
class Envelope:
    """Decoded outer JSON object."""
    code: int
    message: str
    payload: Optional[Any] = None
    pages: Optional[Pages] = None

    @property
    def status(self) -> Optional[ApiStatus]:
        return ApiStatus.lookup(self.code)

    @classmethod
    def parse(cls, raw: bytes) -> "Envelope":
        """
        Decode the envelope from a response body.

        Raises:
            MalformedResponse: Body is not JSON or lacks an integer Code
        """
        try:
            body = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedResponse(f"API Response is malformed: {e}", raw) from e

        if not isinstance(body, dict):
            raise MalformedResponse("API Response is not a JSON object", raw)

        code = body.get("Code")
        if not isinstance(code, int) or isinstance(code, bool):
            raise MalformedResponse("API Response has no integer Code", raw)

        message = body.get("Message", "")
        if not isinstance(message, str):
            raise MalformedResponse("API Response Message is not a string", raw)

        payload = body.get("Response")

        # Collections nest Pages inside Response; tolerate it at the top too
        pages_data = None
        if isinstance(payload, dict):
            pages_data = payload.get("Pages")
        if pages_data is None:
            pages_data = body.get("Pages")
        pages = Pages.from_api(pages_data) if isinstance(pages_data, dict) else None

        return cls(code=code, message=message, payload=payload, pages=pages)
