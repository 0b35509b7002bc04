"""
Image
-----
An image or video stored in an album.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from api.fetch import ApiObject
from core.errors import ImageArchiveNotFound
from .parsers import none_if_empty, parse_datetime

if TYPE_CHECKING:
    from api.client import ApiClient


@dataclass
class Image(ApiObject):
    BASE_URI = "/api/v2/image/"
    RESPONSE_KEY = "Image"

    uri: str
    image_key: str
    title: str = ""
    caption: str = ""
    file_name: str = ""
    format: str = ""
    keywords: str = ""
    is_video: bool = False
    is_hidden: bool = False
    is_watermarked: bool = False
    is_processing: bool = False
    archived_uri: Optional[str] = None
    archived_size: Optional[int] = None
    archived_md5: Optional[str] = None
    date_uploaded: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    web_uri: Optional[str] = None
    client: Optional["ApiClient"] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any], client: "ApiClient") -> "Image":
        return cls(
            uri=data.get("Uri", ""),
            image_key=data.get("ImageKey", ""),
            title=data.get("Title") or "",
            caption=data.get("Caption") or "",
            file_name=data.get("FileName") or "",
            format=data.get("Format") or "",
            keywords=data.get("Keywords") or "",
            is_video=bool(data.get("IsVideo", False)),
            is_hidden=bool(data.get("Hidden", False)),
            is_watermarked=bool(data.get("Watermarked", False)),
            is_processing=bool(data.get("Processing", False)),
            archived_uri=none_if_empty(data.get("ArchivedUri")),
            archived_size=data.get("ArchivedSize"),
            archived_md5=none_if_empty(data.get("ArchivedMD5")),
            date_uploaded=parse_datetime(data.get("DateTimeUploaded")),
            last_updated=parse_datetime(data.get("LastUpdated")),
            web_uri=data.get("WebUri"),
            client=client,
        )

    async def get_archive(self) -> bytes:
        """Download the original file."""
        if not self.archived_uri:
            raise ImageArchiveNotFound(self.file_name, self.image_key)
        response = await self.client.get_binary(self.archived_uri)
        return response.require_payload()

    def __str__(self) -> str:
        return f"{self.file_name or self.image_key} ({self.archived_size or 0} bytes)"
