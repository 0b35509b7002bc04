"""
Error Handling Module
---------------------
Typed errors raised by the client, plus a caller-side retry policy.

The transport never retries. Every failure is raised as one of the
exceptions below and the caller decides what to do with it.
"""

from enum import Enum, auto
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    AUTH_ERROR = auto()          # Incomplete credentials at signing time
    TRANSPORT_ERROR = auto()     # Network failure or non-429 HTTP error
    RATE_LIMITED = auto()        # HTTP 429 with a retry hint
    MALFORMED_RESPONSE = auto()  # Body is not a JSON envelope
    API_ERROR = auto()           # Envelope reported a failure code
    UNKNOWN_STATUS = auto()      # Envelope code outside the known set
    RESPONSE_MISSING = auto()    # Success code, no payload
    RESOURCE_ERROR = auto()      # Resource cannot satisfy the operation
    CONFIG_ERROR = auto()        # Missing or invalid configuration


class SmugMugError(Exception):
    """
    Base class for every error raised by this library.

    Carries a category so callers can branch without isinstance chains.
    """
    category: ErrorCategory = ErrorCategory.TRANSPORT_ERROR
    recoverable: bool = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.category.name}: {self.message})"


class AuthError(SmugMugError):
    """Raised when a request must be signed but the token pair is incomplete."""
    category = ErrorCategory.AUTH_ERROR


class ConfigurationError(SmugMugError):
    """Raised when required configuration or credentials are missing."""
    category = ErrorCategory.CONFIG_ERROR


class TransportError(SmugMugError):
    """I/O failure or an HTTP error status other than a hinted 429."""
    category = ErrorCategory.TRANSPORT_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code
        # Client errors will fail the same way again
        self.recoverable = status_code is None or status_code >= 500


class RateLimited(SmugMugError):
    """HTTP 429 carrying a Retry-After value."""
    category = ErrorCategory.RATE_LIMITED
    recoverable = True

    def __init__(self, retry_after_seconds: int):
        super().__init__(
            f"Too many requests. Retry after {retry_after_seconds} seconds",
            {"retry_after_seconds": retry_after_seconds},
        )
        self.retry_after_seconds = retry_after_seconds


class MalformedResponse(SmugMugError):
    """Body could not be decoded as the expected JSON envelope."""
    category = ErrorCategory.MALFORMED_RESPONSE

    def __init__(self, message: str, raw: bytes = b""):
        super().__init__(message, {"raw_length": len(raw)})
        # Kept so callers can log the exact bytes for diagnosis
        self.raw = raw


class ApiError(SmugMugError):
    """Well-formed envelope reporting a non-success application code."""
    category = ErrorCategory.API_ERROR

    def __init__(self, code: int, message: str):
        super().__init__(
            f"API Response was error: {code}, msg: {message}",
            {"code": code},
        )
        self.code = code
        self.api_message = message


class UnknownStatusCode(SmugMugError):
    """Envelope code outside the documented set. Never coerced."""
    category = ErrorCategory.UNKNOWN_STATUS

    def __init__(self, code: int, message: str = ""):
        super().__init__(
            f"API Response code {code} is not a known status code",
            {"code": code},
        )
        self.code = code
        self.api_message = message


class ResponseMissing(SmugMugError):
    """Success code but the expected payload is absent."""
    category = ErrorCategory.RESPONSE_MISSING

    def __init__(self, message: str = "Expected response missing"):
        super().__init__(message)


class NotAnAlbum(SmugMugError):
    category = ErrorCategory.RESOURCE_ERROR

    def __init__(self, name: str = ""):
        super().__init__(f"This is not an album: {name}" if name else "This is not an album")


class ImageArchiveNotFound(SmugMugError):
    category = ErrorCategory.RESOURCE_ERROR

    def __init__(self, name: str, image_key: str):
        super().__init__(
            f"Image archive not found for: {name} image key:{image_key}",
            {"image_key": image_key},
        )
        self.image_key = image_key


class RetryPolicy:
    """
    Retry policy for callers of the client.

    The transport itself never consults this. It exists so that CLI code
    and applications share one definition of what is worth retrying.
    """

    # Maximum retries per error category
    MAX_RETRIES: Dict[ErrorCategory, int] = {
        ErrorCategory.RATE_LIMITED: 1,
        ErrorCategory.TRANSPORT_ERROR: 2,
        ErrorCategory.AUTH_ERROR: 0,          # No retry - fix credentials
        ErrorCategory.MALFORMED_RESPONSE: 0,  # No retry - log and investigate
        ErrorCategory.UNKNOWN_STATUS: 0,      # No retry - protocol drift
        ErrorCategory.API_ERROR: 0,
        ErrorCategory.RESPONSE_MISSING: 0,
        ErrorCategory.RESOURCE_ERROR: 0,
        ErrorCategory.CONFIG_ERROR: 0,
    }

    # Delay between retries (seconds)
    RETRY_DELAYS: Dict[ErrorCategory, float] = {
        ErrorCategory.TRANSPORT_ERROR: 1.0,
        ErrorCategory.RATE_LIMITED: 1.0,
    }

    @classmethod
    def should_retry(cls, error: SmugMugError, attempt: int) -> bool:
        """Check if operation should be retried."""
        max_retries = cls.MAX_RETRIES.get(error.category, 0)
        return attempt < max_retries and error.recoverable

    @classmethod
    def get_delay(cls, error: SmugMugError) -> float:
        """Get delay before retry in seconds."""
        if isinstance(error, RateLimited):
            return float(error.retry_after_seconds)
        return cls.RETRY_DELAYS.get(error.category, 1.0)
