"""
Pydantic model for application configuration.
Provides validation for all settings read from the INI file.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .server import ServerDescriptor


class ClientConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Server
    hostname: str = ""
    port: int = 80
    use_tls: bool = False

    # Transfer Settings
    download_dir: str = "downloads"
    max_workers: int = 4
    timeout: float | None = None

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535.")
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Timeout must be a positive number of seconds.")
        return v

    @field_validator("download_dir")
    @classmethod
    def validate_download_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("Download directory cannot be empty.")
        return v

    def server_descriptor(self) -> ServerDescriptor | None:
        """
        Builds the server descriptor for these settings.

        Returns None when no hostname is configured, which leaves the client
        unconfigured.

        Raises:
            ValueError: If the hostname is set but not a valid bare host name.
        """
        if not self.hostname:
            return None
        try:
            return ServerDescriptor(
                hostname=self.hostname, port=self.port, use_tls=self.use_tls
            )
        except ValidationError as e:
            raise ValueError(str(e)) from e

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
