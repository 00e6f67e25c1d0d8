"""
Read-only projections of the JSON records returned by the CONTENTdm web services.

Projection is lenient: every field has a default and unknown keys are ignored.
"""

from typing import Any

from pathvalidate import sanitize_filename
from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class CollectionDescriptor(_Record):
    """One entry of dmGetCollectionList."""

    alias: str = ""
    name: str = ""
    path: str = ""
    secondary_alias: str = ""


class FieldDescriptor(_Record):
    """One metadata field of a collection, as returned by dmGetCollectionFieldInfo."""

    name: str = ""
    nick: str = ""
    dc_mapping: str = Field("", alias="dc")
    type: str = ""
    is_admin: bool = Field(False, alias="admin")
    is_hidden: bool = Field(False, alias="hide")
    is_readonly: bool = Field(False, alias="readonly")
    is_required: bool = Field(False, alias="req")
    is_searchable: bool = Field(False, alias="search")
    find_index: str = Field("", alias="find")
    size: int = 0
    vocabulary_flag: bool = Field(False, alias="vocab")
    vocabulary_db_name: str = Field("", alias="vocdb")

    @property
    def is_indexed_for_find(self) -> bool:
        return bool(self.find_index)


class AssetReference(_Record):
    """Identifies a single downloadable file and the name to store it under."""

    alias: str
    pointer: str
    filename: str

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Reduces the name to a single path component inside the download directory."""
        name = safe_filename(v)
        if not name:
            raise ValueError(f"Not a usable file name: {v!r}")
        return name


def safe_filename(value: str) -> str:
    """
    Sanitizes a server-supplied file name. Separators are removed, so absolute
    and relative paths collapse into one name; "." and ".." become empty.
    """
    value = value.strip()
    if value in (".", ".."):
        return ""
    name = sanitize_filename(value)
    return "" if name in (".", "..") else name


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def asset_for_item(alias: str, pointer: str, info: Any) -> AssetReference:
    """
    Builds the asset reference of a single item from its dmGetItemInfo payload.

    The item's stored file name lives in its 'find' key; the pointer is used when
    the payload has none.
    """
    filename = safe_filename(_text(info.get("find"))) if isinstance(info, dict) else ""
    return AssetReference(alias=alias, pointer=str(pointer), filename=filename or str(pointer))


def compound_pages(alias: str, info: Any) -> list[AssetReference]:
    """
    Flattens a dmGetCompoundObjectInfo payload into one asset reference per page.

    Document objects list their pages under 'page'; monographs nest them in
    'node' entries, which may nest further.
    """
    assets: list[AssetReference] = []

    def walk(node: Any) -> None:
        if isinstance(node, list):
            for child in node:
                walk(child)
            return
        if not isinstance(node, dict):
            return

        pages = node.get("page")
        if isinstance(pages, dict):
            pages = [pages]
        for page in pages or []:
            if not isinstance(page, dict):
                continue
            pointer = _text(page.get("pageptr"))
            if not pointer:
                continue
            filename = safe_filename(_text(page.get("pagefile"))) or pointer
            assets.append(AssetReference(alias=alias, pointer=pointer, filename=filename))

        walk(node.get("node"))

    walk(info)
    return assets
