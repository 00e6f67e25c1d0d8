"""
CONTENTdm API Layer.

This package handles all communication with the CONTENTdm web services.
"""

from .client import ContentDmClient
from .endpoints import build_query, file_url, normalize_alias, rpc_endpoint

__all__ = [
    "ContentDmClient",
    "build_query",
    "file_url",
    "normalize_alias",
    "rpc_endpoint",
]
