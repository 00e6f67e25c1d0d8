"""Tests for URL and query construction."""

from cdm_client.api.endpoints import (
    build_query,
    file_url,
    normalize_alias,
    rpc_endpoint,
)
from cdm_client.models.server import ServerDescriptor


class TestRpcEndpoint:
    def test_plain_http(self, server: ServerDescriptor) -> None:
        assert (
            rpc_endpoint(server)
            == "http://cdm.example.org:81/dmwebservices/index.php?"
        )

    def test_tls(self) -> None:
        server = ServerDescriptor(hostname="cdm.example.org", port=443, use_tls=True)
        assert (
            rpc_endpoint(server)
            == "https://cdm.example.org:443/dmwebservices/index.php?"
        )

    def test_unconfigured_is_empty(self) -> None:
        assert rpc_endpoint(None) == ""


class TestFileUrl:
    def test_file_url(self, server: ServerDescriptor) -> None:
        assert (
            file_url(server, "demo", "12")
            == "http://cdm.example.org:81/cgi-bin/showfile.exe?CISOROOT=demo&CISOPTR=12"
        )

    def test_unconfigured_is_empty(self) -> None:
        assert file_url(None, "demo", "12") == ""


class TestBuildQuery:
    def test_parameters_are_positional(self) -> None:
        assert build_query("dmGetItemInfo", ["demo", "12"]) == "q=dmGetItemInfo/demo/12/json"

    def test_single_parameter(self) -> None:
        assert build_query("dmGetCollectionList", ["0"]) == "q=dmGetCollectionList/0/json"

    def test_no_parameters_keep_empty_segment(self) -> None:
        assert build_query("dmGetCollectionList") == "q=dmGetCollectionList//json"


class TestNormalizeAlias:
    def test_leading_slash(self) -> None:
        assert normalize_alias("/demo") == "demo"

    def test_every_slash_is_removed(self) -> None:
        assert normalize_alias("/de/mo/") == "demo"

    def test_plain_alias_unchanged(self) -> None:
        assert normalize_alias("demo") == "demo"
