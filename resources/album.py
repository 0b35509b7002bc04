"""
Album
-----
A collection of images.

Albums compare, hash and sort by album key alone, so two snapshots of
the same album fetched at different times are equal.
"""

from dataclasses import dataclass, field
from datetime import datetime
from functools import total_ordering
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Optional

from api.fetch import ApiObject, stream_children
from api.pagination import VERBOSITY_PARAMS
from core.errors import ResponseMissing
from .image import Image
from .parsers import none_if_empty, parse_datetime, uri_of
from .properties import PrivacyLevel

if TYPE_CHECKING:
    from api.client import ApiClient


@total_ordering
@dataclass(eq=False)
class Album(ApiObject):
    BASE_URI = "/api/v2/album/"
    RESPONSE_KEY = "Album"

    uri: str
    album_key: str
    name: str = ""
    description: str = ""
    url_name: str = ""
    web_uri: Optional[str] = None
    upload_key: Optional[str] = None
    privacy: Optional[PrivacyLevel] = None
    allow_downloads: bool = False
    image_count: int = 0
    total_sizes: Optional[int] = None
    original_sizes: Optional[int] = None
    date_created: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    images_last_updated: Optional[datetime] = None
    node_uri: Optional[str] = None
    album_images_uri: Optional[str] = None
    client: Optional["ApiClient"] = field(default=None, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any], client: "ApiClient") -> "Album":
        return cls(
            uri=data.get("Uri", ""),
            album_key=data.get("AlbumKey", ""),
            name=data.get("Name") or "",
            description=data.get("Description") or "",
            url_name=data.get("UrlName") or "",
            web_uri=data.get("WebUri"),
            upload_key=none_if_empty(data.get("UploadKey")),
            privacy=PrivacyLevel.parse(data.get("Privacy")),
            allow_downloads=bool(data.get("AllowDownloads", False)),
            image_count=data.get("ImageCount") or 0,
            total_sizes=data.get("TotalSizes"),
            original_sizes=data.get("OriginalSizes"),
            date_created=parse_datetime(data.get("Date")),
            last_updated=parse_datetime(data.get("LastUpdated")),
            images_last_updated=parse_datetime(data.get("ImagesLastUpdated")),
            node_uri=uri_of(data, "Node"),
            album_images_uri=uri_of(data, "AlbumImages"),
            client=client,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Album):
            return NotImplemented
        return self.album_key == other.album_key

    def __lt__(self, other: "Album") -> bool:
        if not isinstance(other, Album):
            return NotImplemented
        return self.album_key < other.album_key

    def __hash__(self) -> int:
        return hash(self.album_key)

    def images(self, page_size: Optional[int] = None) -> AsyncIterator[Image]:
        """Stream the album's images; empty when the album has none."""
        return stream_children(
            self.client,
            self.album_images_uri,
            None,
            "AlbumImage",
            lambda data: Image.from_api(data, self.client),
            page_size=page_size,
        )

    async def set_upload_key(self, upload_key: str) -> "Album":
        """Set the album's upload key; returns the updated album."""
        return await self._update({"UploadKey": upload_key})

    async def clear_upload_key(self) -> "Album":
        return await self._update({"UploadKey": ""})

    async def _update(self, changes: Dict[str, Any]) -> "Album":
        response = await self.client.patch(self.uri, changes, params=VERBOSITY_PARAMS)
        data = response.require_payload().get(self.RESPONSE_KEY)
        if data is None:
            raise ResponseMissing(f"Expected 'Album' in response to update of {self.album_key}")
        return Album.from_api(data, self.client)
