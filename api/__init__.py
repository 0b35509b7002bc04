# API module - Signed transport, envelopes, rate limits, pagination
# One client per credential set, no retries inside the transport

from .client import ApiClient, ApiResponse
from .envelope import ApiStatus, Envelope, Pages
from .fetch import ApiObject, fetch_object, fetch_objects, stream_children
from .pagination import paged_stream
from .rate_limit import RateLimitTracker, RateLimitWindow

__all__ = [
    "ApiClient", "ApiResponse",
    "ApiStatus", "Envelope", "Pages",
    "ApiObject", "fetch_object", "fetch_objects", "stream_children",
    "paged_stream",
    "RateLimitTracker", "RateLimitWindow",
]
