"""
Centralized Logging
-------------------
Structured logging with request_id propagation for request traceability.

Design:
- Every transport call runs inside a RequestContext with its own request_id
- request_id propagates through signing, sending and decoding
- Console output through Rich, optional JSON file output
- Severity discipline: DEBUG=per request, WARNING=failed request, ERROR=abort

Nothing is configured on import; applications call configure_logging().

Usage:
    from infra.logging import get_logger, RequestContext

    logger = get_logger("api")

    with RequestContext() as request_id:
        logger.debug("Sending request")
"""

import contextvars
import json
import logging
import logging.handlers
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "smugmug"

# Context variable for request_id - thread-safe and async-safe
_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id_var.get()


class RequestContext:
    """
    Context manager for request scoping.

    Usage:
        with RequestContext() as request_id:
            # All logs within this block will have request_id
            logger.debug("Sending...")
    """

    def __init__(self, request_id: Optional[str] = None):
        self._request_id = request_id or generate_request_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _request_id_var.set(self._request_id)
        return self._request_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _request_id_var.reset(self._token)


class RequestIdFilter(logging.Filter):
    """Logging filter that adds request_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("method", "url", "status_code", "elapsed_ms", "error")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry)


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the library's logging.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for a JSON log file; no file logging when None
        console: Enable console output
        max_bytes: Rotate the log file past this size
        backup_count: Rotated files to keep

    Returns:
        The configured root logger of the library
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    request_filter = RequestIdFilter()

    if console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(level)
        console_handler.addFilter(request_filter)
        root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path / "smugmug.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(request_filter)
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger in the library namespace.

    Args:
        name: Logger name (prefixed with 'smugmug.' if not already)
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def log_request_end(
    method: str,
    url: str,
    status_code: Optional[int],
    elapsed_ms: float,
    error: Optional[str] = None,
) -> None:
    """
    Log the end of one transport call.

    This is the boundary event used when diagnosing a failed sequence.
    """
    logger = get_logger("api.request")

    extra = {
        "method": method,
        "url": url,
        "status_code": status_code,
        "elapsed_ms": round(elapsed_ms, 1),
    }

    if error is None:
        logger.debug(f"{method} {url} -> {status_code} ({elapsed_ms:.0f} ms)", extra=extra)
    else:
        extra["error"] = error
        logger.warning(f"{method} {url} failed: {error}", extra=extra)
