# Infrastructure module - Configuration and logging

from .config import (
    API_ORIGIN, ClientConfig, ConfigManager,
    load_credentials, load_token_cache,
)
from .logging import (
    get_logger, configure_logging, RequestContext,
    log_request_end, get_request_id, generate_request_id,
)

__all__ = [
    # Config
    "API_ORIGIN",
    "ClientConfig",
    "ConfigManager",
    "load_credentials",
    "load_token_cache",
    # Logging
    "get_logger",
    "configure_logging",
    "RequestContext",
    "log_request_end",
    "get_request_id",
    "generate_request_id",
]
