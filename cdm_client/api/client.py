"""
Async client for the CONTENTdm web services (dmwebservices) query-string API.
"""

import asyncio
import json
import logging
from typing import Any, Sequence, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from cdm_client.exceptions import (
    MalformedResponseError,
    NotConfiguredError,
    RequestFailedError,
    ServiceError,
    TransportError,
)
from cdm_client.models.records import CollectionDescriptor, FieldDescriptor
from cdm_client.models.server import ServerDescriptor, Visibility

from . import endpoints

log = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

# Sent in place of the visibility flag when the caller gives none
UNSET_VISIBILITY = "undefined"


class ContentDmClient:
    """
    Async client for one CONTENTdm server.

    Each call is a single HTTP GET: no retries, no caching. The server descriptor
    may be replaced at any time; calls already dispatched keep the URL they were
    started with.
    """

    def __init__(
        self,
        server: ServerDescriptor | None = None,
        timeout: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initializes the client.

        Args:
            server: Address of the CONTENTdm server, or None to start unconfigured.
            timeout: Total timeout per request in seconds. None disables it.
            session: An existing aiohttp session to use instead of creating one.
        """
        self.server: ServerDescriptor | None = server
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = session

    @property
    def is_configured(self) -> bool:
        return self.server is not None

    def configure(self, server: ServerDescriptor | None) -> None:
        """Replaces the server descriptor. Passing None unconfigures the client."""
        log.debug(f"Server descriptor set to {server!r}")
        self.server = server

    def endpoint(self) -> str:
        return endpoints.rpc_endpoint(self.server)

    def file_url(self, alias: str, pointer: str) -> str:
        return endpoints.file_url(self.server, alias, pointer)

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def get_session(self) -> aiohttp.ClientSession:
        """Returns the shared session, creating it on first use."""
        await self._initialize_session()
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "ContentDmClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def invoke(self, function: str, parameters: Sequence[str] = ()) -> Any:
        """
        Calls a web services function and returns its parsed JSON response.

        Args:
            function: Name of the remote function, e.g. 'dmGetItemInfo'.
            parameters: Positional string arguments of the function.

        Raises:
            NotConfiguredError: No server descriptor is set. Nothing is sent.
            TransportError: The connection failed or timed out.
            RequestFailedError: The server answered with a status other than 200.
            MalformedResponseError: The body is not valid JSON.
        """
        endpoint = self.endpoint()
        if not endpoint:
            log.error("ContentDM settings are not set.")
            raise NotConfiguredError("ContentDM settings are not set.")

        url = endpoint + endpoints.build_query(function, parameters)
        session = await self.get_session()
        log.debug(f"GET {url}")

        try:
            async with session.get(url) as r:
                # The body is drained even for failed requests
                body = await r.read()
                status = r.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error(f"Request to {function} failed: {e!r}")
            raise TransportError(f"Request to {function} failed: {e!r}") from e

        if status != 200:
            log.error(f"Request to {function} failed with status {status}")
            raise RequestFailedError(status, url)

        try:
            return json.loads(body)
        except ValueError as e:
            log.error(f"Response to {function} is not valid JSON: {e}")
            raise MalformedResponseError(
                f"Response to {function} is not valid JSON: {e}"
            ) from e

    def _project(self, function: str, data: Any, model: Type[RecordT]) -> list[RecordT]:
        """Projects a JSON array of objects into record models."""
        if isinstance(data, dict) and "code" in data and "message" in data:
            log.error(f"{function} failed: {data['message']} (code {data['code']})")
            raise ServiceError(function, str(data["code"]), str(data["message"]))
        if not isinstance(data, list):
            log.error(f"Expected a list from {function}, got {type(data).__name__}")
            raise MalformedResponseError(
                f"Expected a list from {function}, got {type(data).__name__}."
            )
        try:
            return [model.model_validate(entry) for entry in data]
        except ValidationError as e:
            log.error(f"Unexpected record in response to {function}: {e}")
            raise MalformedResponseError(
                f"Unexpected record in response to {function}."
            ) from e

    # Public API Methods
    async def list_collections(
        self, visibility: Visibility | None = None
    ) -> list[CollectionDescriptor]:
        flag = UNSET_VISIBILITY if visibility is None else str(int(visibility))
        data = await self.invoke("dmGetCollectionList", [flag])
        return self._project("dmGetCollectionList", data, CollectionDescriptor)

    async def collection_field_info(self, alias: str) -> list[FieldDescriptor]:
        alias = endpoints.normalize_alias(alias)
        data = await self.invoke("dmGetCollectionFieldInfo", [alias])
        return self._project("dmGetCollectionFieldInfo", data, FieldDescriptor)

    async def compound_object_info(self, alias: str, pointer: str) -> Any:
        alias = endpoints.normalize_alias(alias)
        return await self.invoke("dmGetCompoundObjectInfo", [alias, str(pointer)])

    async def item_info(self, alias: str, pointer: str) -> Any:
        alias = endpoints.normalize_alias(alias)
        return await self.invoke("dmGetItemInfo", [alias, str(pointer)])
