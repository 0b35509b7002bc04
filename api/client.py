"""
API Client
----------
Signed transport for the SmugMug v2 API.

Rules:
- One httpx.AsyncClient per ApiClient, shared by every call
- Requests are OAuth1-signed when a token pair is configured,
  otherwise sent unsigned with the APIKey query parameter
- Responses are classified, never retried
- The last rate-limit window is kept per client
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Generic, Mapping, Optional, Sequence, Tuple, TypeVar, Union
import json
import logging
import time

import httpx

from auth.credentials import Credentials
from auth.oauth1 import OAuth1Signer
from core.errors import (
    ApiError, RateLimited, ResponseMissing, TransportError, UnknownStatusCode,
    MalformedResponse,
)
from infra.config import ClientConfig
from infra.logging import RequestContext, log_request_end
from .envelope import Envelope, Pages
from .pagination import paged_stream
from .rate_limit import RateLimitTracker, RateLimitWindow


T = TypeVar("T")

Params = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]

API_KEY_PARAM = "APIKey"
BODY_METHODS = frozenset({"PATCH", "POST", "PUT"})


@dataclass
class ApiResponse(Generic[T]):
    """Decoded response from an API call."""
    payload: Optional[T] = None
    rate_limit: Optional[RateLimitWindow] = None
    code: int = 0
    message: str = ""
    pages: Optional[Pages] = None
    response_time_ms: float = 0.0

    def require_payload(self) -> T:
        """Payload, or ResponseMissing when the API sent none."""
        if self.payload is None:
            raise ResponseMissing()
        return self.payload


def _redact(url: httpx.URL) -> str:
    """URL without its query string, safe to log."""
    return str(url).split("?", 1)[0]


def _error_detail(response: httpx.Response) -> str:
    """The API's message from an error body, when the body is an envelope."""
    try:
        envelope = Envelope.parse(response.content)
    except MalformedResponse:
        return ""
    return f": {envelope.message}" if envelope.message else ""


class ApiClient:
    """
    Directly communicates with the API.

    Usage:
        async with ApiClient(Credentials.from_tokens(api_key)) as client:
            response = await client.get("/api/v2/user/apidemo")
    """

    def __init__(
        self,
        credentials: Credentials,
        config: Optional[ClientConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.config = config or ClientConfig()
        self._logger = logging.getLogger("smugmug.api.client")
        self._rate_limits = RateLimitTracker()

        # Without a token pair the signer is never consulted
        self._signer = OAuth1Signer(credentials) if credentials.has_token_pair else None
        if self._signer is None:
            self._logger.info("No access token configured, using API-key-only mode")

        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=transport,
            headers={"User-Agent": self.config.user_agent},
        )

    def __repr__(self) -> str:
        mode = "signed" if self.is_authenticated else "api-key-only"
        return f"ApiClient(origin={self.config.api_origin!r}, mode={mode})"

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        """True when requests are OAuth1-signed."""
        return self._signer is not None

    def last_rate_limit(self) -> Optional[RateLimitWindow]:
        """Rate-limit window from the most recent enveloped response."""
        return self._rate_limits.last_window()

    def build_url(self, url: str, params: Optional[Params] = None) -> httpx.URL:
        """
        Final request URL.

        Relative URLs are resolved against the API origin; caller params
        replace same-named params already in the URL.
        """
        final = httpx.URL(self.config.api_origin).join(url)
        if params:
            final = final.copy_merge_params(params)
        if self._signer is None:
            final = final.copy_merge_params({API_KEY_PARAM: self.credentials.consumer_key})
        return final

    def _encode_body(self, body: Any) -> bytes:
        if body is None:
            return b""
        if isinstance(body, bytes):
            return body
        if isinstance(body, str):
            return body.encode("utf-8")
        return json.dumps(body).encode("utf-8")

    async def _send(
        self,
        method: str,
        url: httpx.URL,
        headers: Dict[str, str],
        content: Optional[bytes] = None,
    ) -> Tuple[httpx.Response, float]:
        """Sign (when configured) and send one request; returns elapsed ms too."""
        if self._signer is not None:
            headers["Authorization"] = self._signer.sign(method, str(url))

        start = time.monotonic()
        try:
            response = await self._http.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as e:
            elapsed = (time.monotonic() - start) * 1000
            log_request_end(method, _redact(url), None, elapsed, error=repr(e))
            raise TransportError(f"Request network error: {e}") from e

        return response, (time.monotonic() - start) * 1000

    def _raise_for_http_status(self, response: httpx.Response, window: RateLimitWindow) -> None:
        if not response.is_error:
            return

        if response.status_code == 429 and window.retry_after_seconds is not None:
            raise RateLimited(window.retry_after_seconds)

        raise TransportError(
            f"HTTP {response.status_code} {response.reason_phrase}{_error_detail(response)}",
            status_code=response.status_code,
        )

    def _check_code(self, envelope: Envelope) -> None:
        status = envelope.status
        if status is None:
            raise UnknownStatusCode(envelope.code, envelope.message)
        if not status.is_success:
            raise ApiError(envelope.code, envelope.message)

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Params] = None,
        body: Any = None,
        decode: Optional[Callable[[Any], T]] = None,
    ) -> ApiResponse[T]:
        """
        Perform one enveloped request.

        Args:
            method: HTTP method
            url: Absolute URL or path relative to the API origin
            params: Query parameters merged into the URL
            body: JSON-serializable body, or raw bytes/str, for PATCH/POST
            decode: Applied to the payload when present

        Raises:
            AuthError, TransportError, RateLimited, MalformedResponse,
            ApiError, UnknownStatusCode
        """
        method = method.upper()
        final_url = self.build_url(url, params)
        headers = {"Accept": "application/json"}
        content = None
        if method in BODY_METHODS:
            headers["Content-Type"] = "application/json"
            content = self._encode_body(body)

        with RequestContext():
            response, elapsed = await self._send(method, final_url, headers, content)

            window = RateLimitWindow.from_headers(response.headers)
            self._rate_limits.update(window)

            try:
                self._raise_for_http_status(response, window)
                envelope = Envelope.parse(response.content)
                self._check_code(envelope)
            except (TransportError, RateLimited, MalformedResponse, ApiError, UnknownStatusCode) as e:
                log_request_end(method, _redact(final_url), response.status_code, elapsed, error=str(e))
                raise

            log_request_end(method, _redact(final_url), response.status_code, elapsed)

        payload = envelope.payload
        if payload is not None and decode is not None:
            payload = decode(payload)

        return ApiResponse(
            payload=payload,
            rate_limit=window,
            code=envelope.code,
            message=envelope.message,
            pages=envelope.pages,
            response_time_ms=elapsed,
        )

    async def get(self, url: str, params: Optional[Params] = None, decode: Optional[Callable[[Any], T]] = None) -> ApiResponse[T]:
        """Make a GET request."""
        return await self.request("GET", url, params=params, decode=decode)

    async def patch(self, url: str, body: Any, params: Optional[Params] = None, decode: Optional[Callable[[Any], T]] = None) -> ApiResponse[T]:
        """Make a PATCH request."""
        return await self.request("PATCH", url, params=params, body=body, decode=decode)

    async def post(self, url: str, body: Any, params: Optional[Params] = None, decode: Optional[Callable[[Any], T]] = None) -> ApiResponse[T]:
        """Make a POST request."""
        return await self.request("POST", url, params=params, body=body, decode=decode)

    async def get_binary(self, url: str, params: Optional[Params] = None) -> ApiResponse[bytes]:
        """
        Download raw bytes (image archives and the like).

        The API sends no quota headers here, so the tracked rate-limit
        window is left untouched and the response carries none.
        """
        final_url = self.build_url(url, params)

        with RequestContext():
            response, elapsed = await self._send("GET", final_url, {})
            try:
                self._raise_for_http_status(response, RateLimitWindow.from_headers(response.headers))
            except (TransportError, RateLimited) as e:
                log_request_end("GET", _redact(final_url), response.status_code, elapsed, error=str(e))
                raise
            log_request_end("GET", _redact(final_url), response.status_code, elapsed)

        return ApiResponse(
            payload=response.content,
            code=response.status_code,
            message=response.reason_phrase,
            response_time_ms=elapsed,
        )

    def paged_stream(
        self,
        url: str,
        params: Optional[Params],
        page_size: Optional[int],
        item_key: str,
        decode: Optional[Callable[[Any], T]] = None,
    ) -> AsyncIterator[T]:
        """
        Lazily iterate every item of a paginated collection.

        ``item_key`` names the item list inside each page payload; a
        ``page_size`` of None uses the configured default.
        """
        return paged_stream(
            self,
            url,
            params,
            page_size or self.config.page_size,
            item_key,
            decode=decode,
            max_pages=self.config.max_pages,
        )
