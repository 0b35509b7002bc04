"""
Rate Limit Tracker
------------------
Last observed quota window reported by the API.

Design:
- One tracker per client, never a module global
- Snapshots are frozen; an update swaps the whole value under a lock
- Readers get either the old or the new window, never a mix
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from threading import Lock
from typing import Mapping, Optional
import logging


REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"
RETRY_AFTER_HEADER = "Retry-After"

logger = logging.getLogger("smugmug.api.rate_limit")


def _parse_uint(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        parsed = int(value.strip())
    except ValueError:
        return None
    return parsed if parsed >= 0 else None


def _parse_retry_after(value: Optional[str], now: datetime) -> Optional[int]:
    """Retry-After is either delta-seconds or an HTTP date."""
    seconds = _parse_uint(value)
    if seconds is not None or value is None:
        return seconds
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable Retry-After header: {value!r}")
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0, int((when - now).total_seconds()))


@dataclass(frozen=True)
class RateLimitWindow:
    """Quota state as of one response."""
    remaining_requests: Optional[int] = None
    window_reset_time: Optional[datetime] = None
    retry_after_seconds: Optional[int] = None
    observed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        observed_at: Optional[datetime] = None,
    ) -> "RateLimitWindow":
        """
        Build a window from response headers.

        ``headers`` must do case-insensitive lookups (httpx.Headers does).
        """
        now = observed_at or datetime.now(timezone.utc)
        reset_epoch = _parse_uint(headers.get(RESET_HEADER))
        reset_time = (
            datetime.fromtimestamp(reset_epoch, tz=timezone.utc)
            if reset_epoch is not None else None
        )
        return cls(
            remaining_requests=_parse_uint(headers.get(REMAINING_HEADER)),
            window_reset_time=reset_time,
            retry_after_seconds=_parse_retry_after(headers.get(RETRY_AFTER_HEADER), now),
            observed_at=now,
        )

    def is_valid(self) -> bool:
        """True if the response carried a remaining count or a retry hint."""
        return self.remaining_requests is not None or self.retry_after_seconds is not None

    def num_remaining_requests(self) -> Optional[int]:
        return self.remaining_requests

    def window_reset_datetime(self) -> Optional[datetime]:
        return self.window_reset_time

    def resume_after(self) -> Optional[datetime]:
        """Earliest time the API asked us to come back, if it asked."""
        if self.retry_after_seconds is None:
            return None
        return self.observed_at + timedelta(seconds=self.retry_after_seconds)


class RateLimitTracker:
    """
    Holds the most recent RateLimitWindow.

    Thread-safe: writes from one task, reads from another.
    """

    def __init__(self):
        self._window: Optional[RateLimitWindow] = None
        self._lock = Lock()

    def update(self, window: RateLimitWindow) -> None:
        """Replace the snapshot wholesale."""
        with self._lock:
            self._window = window

    def last_window(self) -> Optional[RateLimitWindow]:
        """Latest snapshot, or None before the first response."""
        with self._lock:
            return self._window

    def reset(self) -> None:
        with self._lock:
            self._window = None
