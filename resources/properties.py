"""
Resource Properties
-------------------
Enumerations used in query parameters and resource fields.

Values are the exact strings the API sends and expects.
"""

from enum import Enum
from typing import Optional


class SortMethod(str, Enum):
    ORGANIZER = "Organizer"
    SORT_INDEX = "SortIndex"
    NAME = "Name"
    DATE_ADDED = "DateAdded"
    DATE_MODIFIED = "DateModified"


class SortDirection(str, Enum):
    ASCENDING = "Ascending"
    DESCENDING = "Descending"


class NodeTypeFilters(str, Enum):
    """Child node filters; ANY sends no filter at all."""
    ANY = "Any"
    ALBUM = "Album"
    FOLDER = "Folder"
    PAGE = "Page"
    SYSTEM_ALBUM = "System Album"
    FOLDER_ALBUM_PAGE = "Folder Album Page"


class PrivacyLevel(str, Enum):
    UNKNOWN = "Unknown"
    PUBLIC = "Public"
    UNLISTED = "Unlisted"
    PRIVATE = "Private"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["PrivacyLevel"]:
        """Unrecognised values map to UNKNOWN; a missing value stays None."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class NodeType(str, Enum):
    UNKNOWN = "Unknown"
    ALBUM = "Album"
    FOLDER = "Folder"
    PAGE = "Page"
    SYSTEM_FOLDER = "System Folder"
    SYSTEM_PAGE = "System Page"

    @classmethod
    def parse(cls, value: Optional[str]) -> "NodeType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN
