"""
Error Tests
-----------
Tests for the error taxonomy and the caller-side retry policy.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import (
    ApiError, AuthError, ErrorCategory, ImageArchiveNotFound, MalformedResponse,
    NotAnAlbum, RateLimited, ResponseMissing, RetryPolicy, SmugMugError,
    TransportError, UnknownStatusCode,
)


class TestTaxonomy:
    """Every error is a SmugMugError with a category."""

    @pytest.mark.parametrize("error,category", [
        (AuthError("x"), ErrorCategory.AUTH_ERROR),
        (TransportError("x"), ErrorCategory.TRANSPORT_ERROR),
        (RateLimited(5), ErrorCategory.RATE_LIMITED),
        (MalformedResponse("x"), ErrorCategory.MALFORMED_RESPONSE),
        (ApiError(404, "x"), ErrorCategory.API_ERROR),
        (UnknownStatusCode(999), ErrorCategory.UNKNOWN_STATUS),
        (ResponseMissing(), ErrorCategory.RESPONSE_MISSING),
        (NotAnAlbum("x"), ErrorCategory.RESOURCE_ERROR),
        (ImageArchiveNotFound("x", "k"), ErrorCategory.RESOURCE_ERROR),
    ])
    def test_category(self, error, category):
        assert isinstance(error, SmugMugError)
        assert error.category is category

    def test_rate_limited_message(self):
        error = RateLimited(30)

        assert error.retry_after_seconds == 30
        assert "30" in str(error)
        assert error.recoverable

    def test_transport_recoverability(self):
        assert TransportError("network").recoverable
        assert TransportError("server", status_code=503).recoverable
        assert not TransportError("client", status_code=400).recoverable

    def test_repr(self):
        assert repr(ResponseMissing()) == "ResponseMissing(RESPONSE_MISSING: Expected response missing)"


class TestRetryPolicy:
    """Tests for RetryPolicy decisions."""

    def test_rate_limited_retried_once(self):
        error = RateLimited(2)

        assert RetryPolicy.should_retry(error, 0)
        assert not RetryPolicy.should_retry(error, 1)
        assert RetryPolicy.get_delay(error) == 2.0

    def test_transport_retried_twice(self):
        error = TransportError("boom")

        assert RetryPolicy.should_retry(error, 1)
        assert not RetryPolicy.should_retry(error, 2)

    def test_client_error_not_retried(self):
        assert not RetryPolicy.should_retry(TransportError("bad", status_code=404), 0)

    @pytest.mark.parametrize("error", [
        AuthError("x"), ApiError(403, "x"), UnknownStatusCode(999),
        MalformedResponse("x"), ResponseMissing(),
    ])
    def test_never_retried(self, error):
        assert not RetryPolicy.should_retry(error, 0)
