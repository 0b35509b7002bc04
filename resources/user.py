"""
User
----
An account, and the entry point to its folder tree.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

from api.fetch import ApiObject
from core.errors import ResponseMissing
from .node import Node
from .parsers import uri_of

if TYPE_CHECKING:
    from api.client import ApiClient


AUTH_USER_URI = "/api/v2!authuser"


@dataclass
class User(ApiObject):
    BASE_URI = "/api/v2/user/"
    RESPONSE_KEY = "User"

    uri: str
    name: str = ""
    nick_name: str = ""
    first_name: str = ""
    last_name: str = ""
    plan: str = ""
    account_status: str = ""
    time_zone: str = ""
    image_count: int = 0
    web_uri: Optional[str] = None
    node_uri: Optional[str] = None
    client: Optional["ApiClient"] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any], client: "ApiClient") -> "User":
        return cls(
            uri=data.get("Uri", ""),
            name=data.get("Name") or "",
            nick_name=data.get("NickName") or "",
            first_name=data.get("FirstName") or "",
            last_name=data.get("LastName") or "",
            plan=data.get("Plan") or "",
            account_status=data.get("AccountStatus") or "",
            time_zone=data.get("TimeZone") or "",
            image_count=data.get("ImageCount") or 0,
            web_uri=data.get("WebUri"),
            node_uri=uri_of(data, "Node"),
            client=client,
        )

    @classmethod
    async def authenticated_user_info(cls, client: "ApiClient") -> "User":
        """The user the access token belongs to."""
        return await cls.from_url(client, AUTH_USER_URI)

    async def node(self) -> Node:
        """Root node of the user's folder tree."""
        if not self.node_uri:
            raise ResponseMissing(f"User {self.nick_name} has no Node uri")
        return await Node.from_url(self.client, self.node_uri)
