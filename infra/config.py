"""
Configuration
-------------
Client settings and credential loading.

Settings load from YAML with ``SMUGMUG_*`` environment overrides.
Credentials come from the environment, with the access token pair
optionally read from a JSON token cache::

    {"token": "...", "secret": "..."}
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import json
import logging
import os

import yaml

from auth.credentials import Credentials
from core.errors import ConfigurationError


API_ORIGIN = "https://api.smugmug.com"
ENV_PREFIX = "SMUGMUG_"

API_KEY_ENV = "SMUGMUG_API_KEY"
API_SECRET_ENV = "SMUGMUG_API_SECRET"
ACCESS_TOKEN_ENV = "SMUGMUG_ACCESS_TOKEN"
TOKEN_SECRET_ENV = "SMUGMUG_TOKEN_SECRET"
AUTH_CACHE_ENV = "SMUGMUG_AUTH_CACHE"


@dataclass
class ClientConfig:
    """Configuration for an ApiClient."""
    api_origin: str = API_ORIGIN
    timeout_seconds: float = 30.0
    page_size: int = 100
    max_pages: Optional[int] = None  # None = follow cursors until exhausted
    user_agent: str = "smugmug-client/0.6.0"

    def __post_init__(self):
        if self.page_size < 1:
            raise ConfigurationError(f"page_size must be positive, got {self.page_size}")


class ConfigManager:
    """
    Loads configuration from YAML with environment variable overrides.
    """

    def __init__(self, config_path: str = "smugmug.yaml", env: Optional[Mapping[str, str]] = None):
        self._config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._env = os.environ if env is None else env
        self._logger = logging.getLogger("smugmug.infra.config")

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file."""
        if self._config_path.exists():
            with open(self._config_path, "r") as f:
                self._config = yaml.safe_load(f) or {}
            self._logger.info(f"Loaded config from {self._config_path}")
        else:
            self._logger.debug(f"Config file not found: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Supports dot notation: 'section.key'
        Environment variables override file config.
        """
        env_key = f"{ENV_PREFIX}{key.upper().replace('.', '_')}"
        env_value = self._env.get(env_key)
        if env_value is not None:
            return env_value

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def client_config(self) -> ClientConfig:
        """Build a ClientConfig from the ``client`` section."""
        defaults = ClientConfig()
        max_pages = self.get("client.max_pages")
        try:
            return ClientConfig(
                api_origin=str(self.get("client.api_origin", defaults.api_origin)),
                timeout_seconds=float(self.get("client.timeout_seconds", defaults.timeout_seconds)),
                page_size=int(self.get("client.page_size", defaults.page_size)),
                max_pages=int(max_pages) if max_pages is not None else None,
                user_agent=str(self.get("client.user_agent", defaults.user_agent)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()


def load_token_cache(path: Path) -> Dict[str, str]:
    """Read ``{"token": ..., "secret": ...}`` from a token cache file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read token cache {path}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(f"Token cache {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not data.get("token") or not data.get("secret"):
        raise ConfigurationError(f"Token cache {path} must contain 'token' and 'secret'")
    return {"token": data["token"], "secret": data["secret"]}


def load_credentials(
    env: Optional[Mapping[str, str]] = None,
    read_only: bool = False,
) -> Credentials:
    """
    Load credentials from the environment.

    Args:
        env: Mapping to read instead of os.environ
        read_only: Ignore any token pair and return API-key-only credentials

    Raises:
        ConfigurationError: If the API key is missing or the cache is unusable
    """
    env = os.environ if env is None else env
    api_key = env.get(API_KEY_ENV)
    if not api_key:
        raise ConfigurationError(f"Missing required environment variable: {API_KEY_ENV}")

    if read_only:
        return Credentials.from_tokens(api_key)

    api_secret = env.get(API_SECRET_ENV) or None
    token = env.get(ACCESS_TOKEN_ENV) or None
    token_secret = env.get(TOKEN_SECRET_ENV) or None

    cache_path = env.get(AUTH_CACHE_ENV)
    if (token is None or token_secret is None) and cache_path:
        cached = load_token_cache(Path(cache_path))
        token, token_secret = cached["token"], cached["secret"]

    return Credentials.from_tokens(api_key, api_secret, token, token_secret)
