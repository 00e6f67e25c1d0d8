"""
Defines custom exceptions for the client so callers can branch on the kind of failure.
"""


class CdmClientError(Exception):
    """Base exception for all client errors."""


class NotConfiguredError(CdmClientError):
    """Raised when a call is attempted before a server descriptor has been set."""


class RequestFailedError(CdmClientError):
    """Raised when the server answers with a status other than 200."""

    def __init__(self, status: int, url: str):
        super().__init__(f"Request failed.\nStatus Code: {status}")
        self.status = status
        self.url = url


class MalformedResponseError(CdmClientError):
    """
    Raised when a response body cannot be parsed as JSON or projected into records.
    The underlying error is available as ``__cause__``.
    """


class ServiceError(CdmClientError):
    """Raised when the server answers a call with its {"code", "message"} error object."""

    def __init__(self, function: str, code: str, message: str):
        super().__init__(f"{function} failed: {message} (code {code})")
        self.function = function
        self.code = code
        self.message = message


class TransportError(CdmClientError):
    """Raised for connection, DNS, stream and timeout failures in the HTTP layer."""


class RenameFailedError(CdmClientError):
    """Raised when a finished download cannot be moved to its final name."""

    def __init__(self, partial: str, destination: str, reason: str):
        super().__init__(f"Could not rename '{partial}' to '{destination}': {reason}")
        self.partial = partial
        self.destination = destination


class ConfigurationError(CdmClientError):
    """Raised for issues related to configuration loading or validation."""
