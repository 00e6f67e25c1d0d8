"""
Streams item files from the server to disk, publishing each one with an atomic rename.
"""

import asyncio
import functools
import logging
import os
from pathlib import Path
from typing import Iterable

import aiofiles
import aiohttp

from cdm_client.api.client import ContentDmClient
from cdm_client.exceptions import (
    NotConfiguredError,
    RenameFailedError,
    RequestFailedError,
    TransportError,
)
from cdm_client.models.records import AssetReference

log = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"


class AssetDownloader:
    """
    Downloads assets through a client's file retrieval endpoint.

    A file is written to '<filename>.part' and renamed to '<filename>' only once
    the whole body has been received, so the final name never holds a partial
    file. An interrupted transfer leaves the '.part' file behind; it is not
    cleaned up.
    """

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(self, client: ContentDmClient):
        self.client = client
        self._in_flight: dict[Path, asyncio.Task] = {}

    async def download(
        self, asset: AssetReference, destination_dir: str | os.PathLike
    ) -> Path:
        """
        Downloads an asset into a directory unless it is already there.

        Concurrent calls for the same destination share one transfer.

        Returns:
            The path of the downloaded (or already present) file.

        Raises:
            NotConfiguredError: The client has no server descriptor.
            TransportError: The connection failed or broke mid-stream.
            RequestFailedError: The server answered with a status other than 200.
            RenameFailedError: The finished '.part' file could not be renamed.
            ValueError: The asset file name is not a single path component.
        """
        destination = Path(destination_dir) / asset.filename
        if destination.name != asset.filename or asset.filename == "..":
            raise ValueError(f"Not a usable file name: {asset.filename!r}")

        task = self._in_flight.get(destination)
        if task is None:
            task = asyncio.ensure_future(self._download(asset, destination))
            self._in_flight[destination] = task
            task.add_done_callback(functools.partial(self._transfer_done, destination))
        else:
            log.debug(f"Joining in-flight download of '{asset.filename}'")

        return await asyncio.shield(task)

    def _transfer_done(self, destination: Path, task: asyncio.Task) -> None:
        self._in_flight.pop(destination, None)
        # Mark the error as retrieved; every waiter may have been cancelled.
        if not task.cancelled():
            task.exception()

    async def _download(self, asset: AssetReference, destination: Path) -> Path:
        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)

        path_exists = await asyncio.to_thread(os.path.exists, destination)
        if path_exists:
            log.debug(f"'{destination.name}' already exists, skipping.")
            return destination

        url = self.client.file_url(asset.alias, asset.pointer)
        if not url:
            log.error("ContentDM settings are not set.")
            raise NotConfiguredError("ContentDM settings are not set.")

        session = await self.client.get_session()
        log.debug(f"GET {url} -> {partial}")

        try:
            async with session.get(url) as response:
                if response.status != 200:
                    log.error(
                        f"Download of '{asset.filename}' failed with status "
                        f"{response.status}"
                    )
                    raise RequestFailedError(response.status, url)

                async with aiofiles.open(partial, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error(f"Download of '{asset.filename}' failed: {e!r}")
            raise TransportError(f"Download of '{asset.filename}' failed: {e!r}") from e

        try:
            await asyncio.to_thread(os.replace, partial, destination)
        except OSError as e:
            log.error(f"Could not rename '{partial}' to '{destination}': {e}")
            raise RenameFailedError(str(partial), str(destination), str(e)) from e

        log.debug(f"Saved '{destination}'")
        return destination

    async def download_many(
        self,
        assets: Iterable[AssetReference],
        destination_dir: str | os.PathLike,
        max_concurrent: int = 4,
    ) -> dict[AssetReference, BaseException | None]:
        """
        Downloads several assets concurrently.

        Args:
            assets: The assets to download.
            destination_dir: Directory receiving the files.
            max_concurrent: Maximum number of simultaneous transfers.

        Returns:
            Dictionary mapping asset -> the error raised for it, or None on success.
        """
        assets = list(dict.fromkeys(assets))
        seen: dict[str, AssetReference] = {}
        for asset in assets:
            other = seen.setdefault(asset.filename, asset)
            if other is not asset:
                log.warning(
                    f"'{asset.filename}' is shared by pointers {other.pointer} and "
                    f"{asset.pointer}; only one of them will be saved."
                )

        semaphore = asyncio.Semaphore(max_concurrent)

        async def fetch_single(
            asset: AssetReference,
        ) -> tuple[AssetReference, BaseException | None]:
            async with semaphore:
                try:
                    await self.download(asset, destination_dir)
                    return asset, None
                except Exception as e:
                    return asset, e

        results = await asyncio.gather(*(fetch_single(asset) for asset in assets))
        return dict(results)
