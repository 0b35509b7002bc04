# Resources module - Typed views over users, nodes, albums and images
# Each resource keeps the client it was fetched with

from .album import Album
from .image import Image
from .node import CreateAlbumProps, Node
from .properties import NodeType, NodeTypeFilters, PrivacyLevel, SortDirection, SortMethod
from .user import User

__all__ = [
    "User", "Node", "Album", "Image", "CreateAlbumProps",
    "NodeType", "NodeTypeFilters", "PrivacyLevel", "SortDirection", "SortMethod",
]
