# Core module - Error taxonomy and retry policy
# Every failure surfaced by the client is a SmugMugError subclass

from .errors import (
    SmugMugError, ErrorCategory, RetryPolicy,
    AuthError, ConfigurationError, TransportError, RateLimited,
    MalformedResponse, ApiError, UnknownStatusCode, ResponseMissing,
    NotAnAlbum, ImageArchiveNotFound,
)

__all__ = [
    "SmugMugError", "ErrorCategory", "RetryPolicy",
    "AuthError", "ConfigurationError", "TransportError", "RateLimited",
    "MalformedResponse", "ApiError", "UnknownStatusCode", "ResponseMissing",
    "NotAnAlbum", "ImageArchiveNotFound",
]
