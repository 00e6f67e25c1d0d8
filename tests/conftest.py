"""Test fixtures for cdm_client tests."""

import asyncio
from typing import Any

import pytest

from cdm_client.api.client import ContentDmClient
from cdm_client.models.server import ServerDescriptor


class FakeStreamReader:
    """Stands in for aiohttp's StreamReader on a scripted response."""

    def __init__(
        self,
        chunks: list[bytes],
        error: BaseException | None = None,
        gate: asyncio.Event | None = None,
    ):
        self._chunks = chunks
        self._error = error
        self._gate = gate

    async def iter_chunked(self, n: int):
        if self._gate is not None:
            await self._gate.wait()
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


class FakeResponse:
    """A scripted HTTP response usable as ``async with session.get(...) as r``."""

    def __init__(
        self,
        status: int = 200,
        body: bytes = b"",
        chunks: list[bytes] | None = None,
        error: BaseException | None = None,
        gate: asyncio.Event | None = None,
    ):
        self.status = status
        self._body = body
        self.read_called = False
        self.content = FakeStreamReader(
            chunks if chunks is not None else [body], error=error, gate=gate
        )

    async def read(self) -> bytes:
        self.read_called = True
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


class _RequestContext:
    def __init__(self, outcome: Any):
        self._outcome = outcome

    async def __aenter__(self):
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return await self._outcome.__aenter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


class FakeSession:
    """
    Records every GET and answers with scripted responses.

    Responses are looked up by exact URL in ``routes``, falling back to ``default``.
    An exception in place of a response is raised when the request is entered.
    """

    def __init__(self, default: Any = None, routes: dict[str, Any] | None = None):
        self.default = default if default is not None else FakeResponse(body=b"[]")
        self.routes = routes or {}
        self.calls: list[str] = []
        self.closed = False

    def get(self, url: str, **kwargs: Any) -> _RequestContext:
        self.calls.append(url)
        return _RequestContext(self.routes.get(url, self.default))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def server() -> ServerDescriptor:
    return ServerDescriptor(hostname="cdm.example.org", port=81, use_tls=False)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(server: ServerDescriptor, session: FakeSession) -> ContentDmClient:
    return ContentDmClient(server, session=session)


@pytest.fixture
def unconfigured_client(session: FakeSession) -> ContentDmClient:
    return ContentDmClient(None, session=session)
