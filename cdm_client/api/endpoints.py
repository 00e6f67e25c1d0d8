"""
URL construction for the CONTENTdm web services and file retrieval endpoints.

Every function here is pure. An absent server descriptor resolves to an empty
string, which callers must treat as "not configured".
"""

from typing import Sequence

from cdm_client.models.server import ServerDescriptor

RPC_PATH = "/dmwebservices/index.php?"
FILE_PATH = "/cgi-bin/showfile.exe"


def rpc_endpoint(server: ServerDescriptor | None) -> str:
    """Returns the web services endpoint, ready for a query string to be appended."""
    if not server:
        return ""
    return server.base_url + RPC_PATH


def file_url(server: ServerDescriptor | None, alias: str, pointer: str) -> str:
    """Returns the URL serving the raw file of an item."""
    if not server:
        return ""
    return f"{server.base_url}{FILE_PATH}?CISOROOT={alias}&CISOPTR={pointer}"


def build_query(function: str, parameters: Sequence[str] = ()) -> str:
    """
    Serializes a web services call into its query string.

    The service parses arguments positionally, so the separators are fixed:
    a call without parameters still carries an empty segment ('q=fn//json').
    """
    return f"q={function}/{'/'.join(parameters)}/json"


def normalize_alias(alias: str) -> str:
    """Strips every '/' so that '/demo' and 'demo' address the same collection."""
    return alias.replace("/", "")
