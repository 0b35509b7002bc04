"""
Node
----
An entry in a user's folder tree: a folder, an album or a page.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from api.fetch import ApiObject, stream_children
from api.pagination import VERBOSITY_PARAMS
from core.errors import NotAnAlbum, ResponseMissing
from .album import Album
from .parsers import last_segment, parse_datetime, uri_of
from .properties import NodeType, NodeTypeFilters, PrivacyLevel, SortDirection, SortMethod

if TYPE_CHECKING:
    from api.client import ApiClient


class CreateAlbumProps(BaseModel):
    """Properties accepted when creating an album under a folder node."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="Name", min_length=1)
    url_name: Optional[str] = Field(None, alias="UrlName")
    description: Optional[str] = Field(None, alias="Description")
    password_hint: Optional[str] = Field(None, alias="PasswordHint")
    upload_key: Optional[str] = Field(None, alias="UploadKey")
    privacy: Optional[PrivacyLevel] = Field(None, alias="Privacy")
    web_uri: Optional[str] = Field(None, alias="WebUri")

    def to_api(self) -> Dict[str, Any]:
        """Request body; unset properties are left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass
class Node(ApiObject):
    BASE_URI = "/api/v2/node/"
    RESPONSE_KEY = "Node"

    uri: str
    node_id: str
    name: str = ""
    description: str = ""
    url_name: str = ""
    url_path: str = ""
    web_uri: Optional[str] = None
    node_type: NodeType = NodeType.UNKNOWN
    privacy: Optional[PrivacyLevel] = None
    has_children: bool = False
    is_root: bool = False
    date_added: Optional[datetime] = None
    date_modified: Optional[datetime] = None
    album_uri: Optional[str] = None
    child_nodes_uri: Optional[str] = None
    client: Optional["ApiClient"] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any], client: "ApiClient") -> "Node":
        return cls(
            uri=data.get("Uri", ""),
            node_id=data.get("NodeID", ""),
            name=data.get("Name") or "",
            description=data.get("Description") or "",
            url_name=data.get("UrlName") or "",
            url_path=data.get("UrlPath") or "",
            web_uri=data.get("WebUri"),
            node_type=NodeType.parse(data.get("Type")),
            privacy=PrivacyLevel.parse(data.get("Privacy")),
            has_children=bool(data.get("HasChildren", False)),
            is_root=bool(data.get("IsRoot", False)),
            date_added=parse_datetime(data.get("DateAdded")),
            date_modified=parse_datetime(data.get("DateModified")),
            album_uri=uri_of(data, "Album"),
            child_nodes_uri=uri_of(data, "ChildNodes"),
            client=client,
        )

    @property
    def is_album(self) -> bool:
        return self.album_uri is not None

    def album_id(self) -> Optional[str]:
        """Album key, when this node is an album."""
        return last_segment(self.album_uri)

    async def album(self) -> Album:
        """The album behind this node; NotAnAlbum for folders and pages."""
        if not self.album_uri:
            raise NotAnAlbum(self.name)
        return await Album.from_url(self.client, self.album_uri)

    def children(
        self,
        type_filter: NodeTypeFilters = NodeTypeFilters.ANY,
        sort_direction: SortDirection = SortDirection.DESCENDING,
        sort_method: SortMethod = SortMethod.SORT_INDEX,
        page_size: Optional[int] = None,
    ) -> AsyncIterator["Node"]:
        """Stream child nodes; only non-default filters are sent."""
        params: List[Tuple[str, str]] = [("SortDirection", sort_direction.value)]
        if type_filter is not NodeTypeFilters.ANY:
            params.append(("Type", type_filter.value))
        if sort_method is not SortMethod.SORT_INDEX:
            params.append(("SortMethod", sort_method.value))

        return stream_children(
            self.client,
            self.child_nodes_uri,
            params,
            self.RESPONSE_KEY,
            lambda data: Node.from_api(data, self.client),
            page_size=page_size,
        )

    async def create_album(self, props: CreateAlbumProps) -> Album:
        """Create an album as a child of this (folder) node."""
        if not self.child_nodes_uri:
            raise ResponseMissing(f"Node {self.node_id} has no ChildNodes uri")
        response = await self.client.post(self.child_nodes_uri, props.to_api(), params=VERBOSITY_PARAMS)
        data = response.require_payload().get(Album.RESPONSE_KEY)
        if data is None:
            raise ResponseMissing("Expected 'Album' in response to album creation")
        return Album.from_api(data, self.client)
