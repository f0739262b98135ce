"""HTTP implementation of the Fetcher port."""

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import Generator, Optional

import httpx

from ..application.domain import DownloadObserver, DownloadProgress, Fetcher
from ..application.exceptions import DownloadError, RedirectLoopError

MAX_REDIRECTS = 5


class HttpFetcher(Fetcher):
    """A fetcher that streams files via HTTP, following redirects itself."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: Optional[float] = None,
        chunk_size: int = 65536,
        max_redirects: int = MAX_REDIRECTS,
    ):
        """Initializes the fetcher adapter."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client = client
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.max_redirects = max_redirects

    @contextlib.contextmanager
    def _atomic_target(self, destination: Path) -> Generator[Path, None, None]:
        """Provides a temporary '.part' path and ensures cleanup."""
        part_path = destination.with_suffix(destination.suffix + ".part")
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            yield part_path
        finally:
            part_path.unlink(missing_ok=True)

    async def _stream_to_file(
        self,
        response: httpx.Response,
        target_file: Path,
        on_progress: Optional[DownloadObserver],
    ):
        """Write the response body chunk by chunk, reporting progress."""
        length = response.headers.get("content-length")
        total = int(length) if length and length.isdigit() else None
        received = 0
        with open(target_file, "wb") as f:
            async for chunk in response.aiter_bytes(self.chunk_size):
                await asyncio.to_thread(f.write, chunk)
                received += len(chunk)
                if on_progress:
                    on_progress(DownloadProgress(received=received, total=total))

    async def _stream_from_network(
        self,
        url: str,
        target_file: Path,
        on_progress: Optional[DownloadObserver],
    ):
        """Manage the request chain and the streaming process."""
        current = httpx.URL(url)
        for _ in range(self.max_redirects + 1):
            async with self.client.stream(
                "GET", current, timeout=self.timeout, follow_redirects=False
            ) as response:
                status = response.status_code
                location = response.headers.get("location")
                if 300 <= status < 400 and location:
                    current = current.join(location)
                    self.logger.debug(f"Redirected to {current}")
                    continue
                if not status or status >= 300:
                    raise DownloadError(status, str(current))
                await self._stream_to_file(response, target_file, on_progress)
                return
        raise RedirectLoopError(
            f"Too many redirects (more than {self.max_redirects}) for {url}"
        )

    async def fetch(
        self,
        url: str,
        destination: Path,
        on_progress: Optional[DownloadObserver] = None,
    ):
        """
        Stream `url` into `destination`, creating parent directories.

        The body is written to a sibling '.part' file that only takes the
        destination name once the transfer completed.

        Args:
            url: The URL to download.
            destination: The final path for the file.
            on_progress: Called after each chunk with the running totals.

        Raises:
            DownloadError: If the final response has a failing status.
            RedirectLoopError: If more than `max_redirects` redirects occur.
            httpx.HTTPError: Transport errors propagate unchanged.
        """
        destination = Path(destination)
        self.logger.info(f"Downloading {destination.name}...")
        with self._atomic_target(destination) as part_path:
            await self._stream_from_network(url, part_path, on_progress)
            part_path.replace(destination)
        self.logger.info(f"Finished downloading {destination.name}")
