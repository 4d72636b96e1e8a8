"""HTTP download of the registry dump.

All transport failures surface as ``TransportError``; the caller keeps its
current snapshot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from macvendor.config import FetcherSettings
from macvendor.errors import TransportError

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings | None = None) -> httpx.Client:
    """Create the shared httpx client used for registry downloads."""
    settings = settings or FetcherSettings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )


class RegistryFetcher:
    """Streams the registry dump from its source URL."""

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def download(self, url: str, destination: Path) -> int:
        """Stream ``url`` into ``destination``. Returns the number of bytes written."""
        written = 0
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with open(destination, "wb") as out:
                    for chunk in response.iter_bytes():
                        out.write(chunk)
                        written += len(chunk)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("registry_download_failed", url=url, status_code=status)
            raise TransportError(
                f"HTTP {status} fetching {url}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("registry_download_failed", url=url, error=str(exc))
            raise TransportError(f"Network error fetching {url}: {exc}") from exc

        log.info("registry_downloaded", url=url, bytes=written, path=str(destination))
        return written

    def fetch(self, url: str) -> bytes:
        """Return the body of ``url`` in memory (used when there is no cache directory)."""
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("registry_download_failed", url=url, status_code=status)
            raise TransportError(
                f"HTTP {status} fetching {url}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("registry_download_failed", url=url, error=str(exc))
            raise TransportError(f"Network error fetching {url}: {exc}") from exc

        log.info("registry_downloaded", url=url, bytes=len(response.content))
        return response.content
