"""Tests for the server descriptor, records and configuration models."""

import pytest
from pydantic import ValidationError

from cdm_client.models.config import ClientConfig
from cdm_client.models.records import (
    AssetReference,
    CollectionDescriptor,
    FieldDescriptor,
    asset_for_item,
    compound_pages,
)
from cdm_client.models.server import ServerDescriptor, Visibility


class TestServerDescriptor:
    def test_defaults(self) -> None:
        server = ServerDescriptor(hostname="cdm.example.org")
        assert server.port == 80
        assert server.use_tls is False
        assert server.base_url == "http://cdm.example.org:80"

    def test_tls_scheme(self) -> None:
        server = ServerDescriptor(hostname="cdm.example.org", port=443, use_tls=True)
        assert server.scheme == "https"

    def test_is_immutable(self, server: ServerDescriptor) -> None:
        with pytest.raises(ValidationError):
            server.port = 8080

    def test_is_hashable(self, server: ServerDescriptor) -> None:
        assert {server: 1}[ServerDescriptor(hostname="cdm.example.org", port=81)] == 1

    @pytest.mark.parametrize("hostname", ["", "   ", "http://cdm.example.org"])
    def test_invalid_hostname(self, hostname: str) -> None:
        with pytest.raises(ValidationError):
            ServerDescriptor(hostname=hostname)

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_invalid_port(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ServerDescriptor(hostname="cdm.example.org", port=port)


class TestVisibility:
    def test_wire_values(self) -> None:
        assert int(Visibility.PUBLISHED) == 0
        assert int(Visibility.UNPUBLISHED) == 1


class TestRecords:
    def test_collection_ignores_unknown_keys(self) -> None:
        collection = CollectionDescriptor.model_validate(
            {"alias": "/demo", "name": "Demo", "extra": {"nested": True}}
        )
        assert collection.alias == "/demo"
        assert collection.path == ""
        assert collection.secondary_alias == ""

    def test_field_from_server_keys(self) -> None:
        field = FieldDescriptor.model_validate(
            {
                "name": "Subject",
                "nick": "subjec",
                "type": "TEXT",
                "size": 1,
                "find": "",
                "req": 0,
                "search": 1,
                "hide": 1,
                "vocdb": "LCTGM",
                "vocab": 1,
                "dc": "subjec",
                "admin": 1,
                "readonly": 1,
            }
        )
        assert field.dc_mapping == "subjec"
        assert field.is_admin is True
        assert field.is_hidden is True
        assert field.is_readonly is True
        assert field.is_required is False
        assert field.size == 1
        assert field.vocabulary_flag is True
        assert field.vocabulary_db_name == "LCTGM"
        assert field.is_indexed_for_find is False

    def test_field_by_python_names(self) -> None:
        field = FieldDescriptor(nick="title", is_required=True, find_index="a0")
        assert field.is_required is True
        assert field.is_indexed_for_find is True


class TestAssetForItem:
    def test_uses_stored_file_name(self) -> None:
        asset = asset_for_item("demo", "12", {"title": "Letter", "find": "12.jp2"})
        assert asset == AssetReference(alias="demo", pointer="12", filename="12.jp2")

    @pytest.mark.parametrize("info", [{}, {"find": {}}, {"find": ""}, [], None])
    def test_falls_back_to_pointer(self, info) -> None:
        assert asset_for_item("demo", "12", info).filename == "12"

    @pytest.mark.parametrize("find", ["/etc/passwd", "../../escape.jp2", "a/b\\c.jp2"])
    def test_path_in_file_name_is_flattened(self, find: str) -> None:
        filename = asset_for_item("demo", "12", {"find": find}).filename
        assert filename
        assert "/" not in filename
        assert "\\" not in filename

    @pytest.mark.parametrize("find", ["..", ".", "/"])
    def test_unusable_file_name_falls_back_to_pointer(self, find: str) -> None:
        assert asset_for_item("demo", "12", {"find": find}).filename == "12"


class TestAssetReference:
    @pytest.mark.parametrize("filename", ["", "..", ".", "/"])
    def test_rejects_unusable_file_name(self, filename: str) -> None:
        with pytest.raises(ValidationError):
            AssetReference(alias="demo", pointer="1", filename=filename)

    def test_absolute_file_name_becomes_one_component(self) -> None:
        asset = AssetReference(alias="demo", pointer="1", filename="/tmp/outside/evil.bin")
        assert "/" not in asset.filename
        assert asset.filename.endswith("evil.bin")


class TestCompoundPages:
    def test_document_pages(self) -> None:
        info = {
            "type": "Document",
            "page": [
                {"pagetitle": "Page 1", "pagefile": "1.jp2", "pageptr": "1"},
                {"pagetitle": "Page 2", "pagefile": "2.jp2", "pageptr": "2"},
            ],
        }
        assert compound_pages("demo", info) == [
            AssetReference(alias="demo", pointer="1", filename="1.jp2"),
            AssetReference(alias="demo", pointer="2", filename="2.jp2"),
        ]

    def test_monograph_nodes(self) -> None:
        info = {
            "type": "Monograph",
            "node": {
                "nodetitle": "Book",
                "node": [
                    {"nodetitle": "Chapter 1", "page": {"pagefile": "3.pdf", "pageptr": 3}},
                    {
                        "nodetitle": "Chapter 2",
                        "page": [{"pagefile": "4.pdf", "pageptr": "4"}],
                        "node": {"page": [{"pagefile": {}, "pageptr": "5"}]},
                    },
                ],
            },
        }
        assert [(a.pointer, a.filename) for a in compound_pages("demo", info)] == [
            ("3", "3.pdf"),
            ("4", "4.pdf"),
            ("5", "5"),
        ]

    def test_pages_without_pointer_are_skipped(self) -> None:
        info = {"page": [{"pagefile": "orphan.jp2"}, "junk", {"pageptr": "7"}]}
        assert compound_pages("demo", info) == [
            AssetReference(alias="demo", pointer="7", filename="7")
        ]

    def test_page_file_paths_are_flattened(self) -> None:
        info = {
            "page": [
                {"pagefile": "/var/www/evil.bin", "pageptr": "1"},
                {"pagefile": "..", "pageptr": "2"},
            ]
        }
        pages = compound_pages("demo", info)
        assert "/" not in pages[0].filename
        assert pages[0].filename.endswith("evil.bin")
        assert pages[1].filename == "2"

    def test_not_compound(self) -> None:
        assert compound_pages("demo", {"code": "-2", "message": "not found"}) == []


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig(config_path="/tmp")
        assert config.port == 80
        assert config.max_workers == 4
        assert config.timeout is None
        assert config.server_descriptor() is None

    def test_server_descriptor(self) -> None:
        config = ClientConfig(
            hostname=" cdm.example.org ", port=81, use_tls=True, config_path="/tmp"
        )
        assert config.server_descriptor() == ServerDescriptor(
            hostname="cdm.example.org", port=81, use_tls=True
        )

    def test_bad_hostname_raises_value_error(self) -> None:
        config = ClientConfig(hostname="http://cdm.example.org", config_path="/tmp")
        with pytest.raises(ValueError):
            config.server_descriptor()

    @pytest.mark.parametrize(
        "overrides",
        [{"max_workers": 0}, {"max_workers": 33}, {"timeout": 0}, {"port": 70000}],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(config_path="/tmp", **overrides)

    def test_ini_keys(self) -> None:
        assert ClientConfig.get_ini_keys() == {
            "hostname",
            "port",
            "use_tls",
            "download_dir",
            "max_workers",
            "timeout",
        }
