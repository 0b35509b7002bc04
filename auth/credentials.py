"""
Credentials
-----------
API key/secret and the already-issued OAuth1 access token pair.

Rules:
- Immutable once constructed
- Secrets never appear in repr or logs
- The token pair is optional; without it the client is read-only
"""

from dataclasses import dataclass, field
from typing import Optional

from core.errors import ConfigurationError


def _present(value: Optional[str]) -> bool:
    return bool(value)


@dataclass(frozen=True)
class Credentials:
    """Consumer key/secret plus an optional access token pair."""
    consumer_key: str
    consumer_secret: Optional[str] = field(default=None, repr=False)
    access_token: Optional[str] = field(default=None, repr=False)
    token_secret: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if not self.consumer_key:
            raise ConfigurationError("An API key (consumer key) is required")

    @classmethod
    def from_tokens(
        cls,
        consumer_key: str,
        consumer_secret: Optional[str] = None,
        access_token: Optional[str] = None,
        token_secret: Optional[str] = None,
    ) -> "Credentials":
        """Build credentials; pass only the key for public read-only access."""
        return cls(consumer_key, consumer_secret, access_token, token_secret)

    @property
    def has_token_pair(self) -> bool:
        """True when an access token and its secret were supplied."""
        return _present(self.access_token) and _present(self.token_secret)

    @property
    def can_sign(self) -> bool:
        """True when every value OAuth1 signing needs is present."""
        return _present(self.consumer_secret) and self.has_token_pair

    def __repr__(self) -> str:
        return (
            "Credentials(consumer_key='xxx', consumer_secret='xxx', "
            "access_token='xxx', token_secret='xxx')"
        )
