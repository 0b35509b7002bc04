"""
SmugMug Client Test Configuration
---------------------------------
Shared fixtures and configuration for all tests.

No test touches the network: every ApiClient is built on an
httpx.MockTransport whose handler plays the API.
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from api.client import ApiClient
from auth.credentials import Credentials
from infra.config import ClientConfig


# =============================================================================
# Credentials
# =============================================================================

@pytest.fixture
def signing_credentials() -> Credentials:
    """Full credential tuple; requests are OAuth1-signed."""
    return Credentials.from_tokens("test-key", "test-secret", "test-token", "test-token-secret")


@pytest.fixture
def api_key_credentials() -> Credentials:
    """API key only; requests carry APIKey and no Authorization header."""
    return Credentials.from_tokens("test-key")


# =============================================================================
# Fake API
# =============================================================================

def make_envelope(
    payload: Any = None,
    code: int = 200,
    message: str = "Ok",
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
    pages: Optional[Dict[str, Any]] = None,
) -> httpx.Response:
    """An API response with the standard {Code, Message, Response} body."""
    body: Dict[str, Any] = {"Code": code, "Message": message}
    if payload is not None:
        if pages is not None:
            payload = dict(payload, Pages=pages)
        body["Response"] = payload
    return httpx.Response(status_code, content=json.dumps(body).encode("utf-8"), headers=headers)


@pytest.fixture
def envelope() -> Callable[..., httpx.Response]:
    """Builder for enveloped responses."""
    return make_envelope


class RecordingHandler:
    """MockTransport handler that records every request it answers."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self._responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)


@pytest.fixture
def make_client(signing_credentials):
    """
    Factory for clients backed by a recording mock transport.

    Returns (client, handler); handler.requests lists what was sent.
    """
    def _make(
        responder: Callable[[httpx.Request], httpx.Response],
        credentials: Optional[Credentials] = None,
        config: Optional[ClientConfig] = None,
    ):
        handler = RecordingHandler(responder)
        client = ApiClient(
            credentials or signing_credentials,
            config,
            transport=httpx.MockTransport(handler),
        )
        return client, handler

    return _make
