"""
Data Models Layer.

This package contains Pydantic models for the server descriptor, the records
returned by the web services, and the application configuration.
"""

from .config import ClientConfig
from .records import (
    AssetReference,
    CollectionDescriptor,
    FieldDescriptor,
    asset_for_item,
    compound_pages,
)
from .server import ServerDescriptor, Visibility

__all__ = [
    "AssetReference",
    "ClientConfig",
    "CollectionDescriptor",
    "FieldDescriptor",
    "ServerDescriptor",
    "Visibility",
    "asset_for_item",
    "compound_pages",
]
