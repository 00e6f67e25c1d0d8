"""
Server descriptor and visibility flag used to address a CONTENTdm server.
"""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, field_validator


class Visibility(IntEnum):
    """Selects which collection set dmGetCollectionList returns."""

    PUBLISHED = 0
    UNPUBLISHED = 1


class ServerDescriptor(BaseModel):
    """An immutable address of a CONTENTdm server."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    hostname: str
    port: int = 80
    use_tls: bool = False

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v: str) -> str:
        if not v:
            raise ValueError("Hostname cannot be empty.")
        if "/" in v:
            raise ValueError(f"Hostname must not contain a scheme or path, but got: {v}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535.")
        return v

    @property
    def scheme(self) -> str:
        return "https" if self.use_tls else "http"

    @property
    def base_url(self) -> str:
        """Scheme, host and port, without a trailing slash."""
        return f"{self.scheme}://{self.hostname}:{self.port}"
