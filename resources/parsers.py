"""Field parsers shared by the resource types."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.errors import MalformedResponse


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """ISO 8601 timestamp as sent by the API; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise MalformedResponse(f"Invalid timestamp {value!r}: {e}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def uri_of(data: Dict[str, Any], name: str) -> Optional[str]:
    """
    URI named ``name`` in the object's ``Uris`` block.

    With _verbosity=1 the entry is a plain string; at higher verbosity it
    is an object carrying ``Uri``.
    """
    entry = (data.get("Uris") or {}).get(name)
    if isinstance(entry, dict):
        entry = entry.get("Uri")
    return entry or None


def last_segment(uri: Optional[str]) -> Optional[str]:
    """Trailing path segment, e.g. the album key of /api/v2/album/SJT3DX."""
    if not uri:
        return None
    return uri.rstrip("/").rsplit("/", 1)[-1] or None


def none_if_empty(value: Optional[str]) -> Optional[str]:
    return value or None
