"""
OAuth1 Request Signer
---------------------
Builds the ``Authorization`` header for an OAuth 1.0a HMAC-SHA1 request.

Algorithm:
1. Fresh nonce (32 alphanumerics) and Unix timestamp per request
2. OAuth parameters + the URL's query parameters, RFC 3986 encoded,
   sorted by key then value
3. Base string: METHOD & enc(url without query) & enc(sorted params)
4. Key: enc(consumer_secret) & enc(token_secret)
5. Signature: base64(HMAC-SHA1(key, base string))
6. Header carries the OAuth parameters and the signature only

The RFC 5849 building blocks come from oauthlib so the encoding and base
string rules match every other OAuth1 implementation byte for byte.
"""

from typing import Dict, List, Optional, Tuple
import logging
import time

import httpx
from oauthlib.common import UNICODE_ASCII_CHARACTER_SET, generate_token
from oauthlib.oauth1 import Client as OAuthlibClient
from oauthlib.oauth1.rfc5849 import signature as rfc5849_signature
from oauthlib.oauth1.rfc5849 import utils as rfc5849_utils

from core.errors import AuthError
from .credentials import Credentials


SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
NONCE_LENGTH = 32


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    """Random ASCII alphanumeric nonce."""
    return generate_token(length=length, chars=UNICODE_ASCII_CHARACTER_SET)


def generate_timestamp() -> str:
    """Current Unix time in seconds as a decimal string."""
    return str(int(time.time()))


def percent_encode(value: str) -> str:
    """RFC 3986 encoding; ``A-Za-z0-9-._~`` are left untouched."""
    return rfc5849_utils.escape(value)


def percent_decode(value: str) -> str:
    return rfc5849_utils.unescape(value)


def query_parameters(url: str) -> List[Tuple[str, str]]:
    """Decoded query parameters of ``url``, duplicates preserved."""
    return list(httpx.URL(url).params.multi_items())


def base_string(method: str, url: str, oauth_params: Dict[str, str]) -> str:
    """Signature base string for ``url`` with the given OAuth parameters."""
    params = list(oauth_params.items()) + query_parameters(url)
    normalized = rfc5849_signature.normalize_parameters(params)
    uri = rfc5849_signature.base_string_uri(url)
    return rfc5849_signature.signature_base_string(method.upper(), uri, normalized)


class OAuth1Signer:
    """
    Produces per-request Authorization headers.

    Pure given the nonce and timestamp; holds nothing but the credentials.
    """

    def __init__(self, credentials: Credentials):
        self._credentials = credentials
        self._logger = logging.getLogger("smugmug.auth.oauth1")

    def oauth_parameters(
        self,
        nonce: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> Dict[str, str]:
        """The six protocol parameters, in header order."""
        if not self._credentials.can_sign:
            raise AuthError(
                "Signing requires consumer secret, access token and token secret"
            )
        return {
            "oauth_consumer_key": self._credentials.consumer_key,
            "oauth_nonce": nonce or generate_nonce(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": timestamp or generate_timestamp(),
            "oauth_token": self._credentials.access_token,
            "oauth_version": OAUTH_VERSION,
        }

    def signature(self, method: str, url: str, oauth_params: Dict[str, str]) -> str:
        """base64 HMAC-SHA1 over the base string."""
        oauth_client = OAuthlibClient(
            self._credentials.consumer_key,
            client_secret=self._credentials.consumer_secret,
            resource_owner_key=self._credentials.access_token,
            resource_owner_secret=self._credentials.token_secret,
        )
        return rfc5849_signature.sign_hmac_sha1_with_client(
            base_string(method, url, oauth_params), oauth_client
        )

    def sign(
        self,
        method: str,
        url: str,
        nonce: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> str:
        """
        Build the Authorization header value for one request.

        Args:
            method: HTTP method
            url: Full request URL including any query string
            nonce: Fixed nonce (tests only)
            timestamp: Fixed timestamp (tests only)

        Raises:
            AuthError: If the credential tuple is incomplete
        """
        oauth_params = self.oauth_parameters(nonce, timestamp)
        header_params = dict(oauth_params)
        header_params["oauth_signature"] = self.signature(method, url, oauth_params)

        self._logger.debug(f"Signed {method.upper()} request")
        return "OAuth " + ",".join(
            f'{key}="{percent_encode(value)}"' for key, value in header_params.items()
        )
