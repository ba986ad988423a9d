"""HTTP bottle fetcher.

Downloads one hosted bottle from the base URL registered for its host and
streams it into the destination directory. The body is written to a
``.part`` file that is renamed into place only once it is complete, so a
failed or interrupted download never leaves a truncated bottle behind.
"""

import asyncio
import hashlib
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

import aiohttp

from bottle_wrangler.constants import DEFAULT_TIMEOUT_SECONDS
from bottle_wrangler.fetchers.base import BaseFetcher
from bottle_wrangler.fetchers.http import HttpClientMixin
from bottle_wrangler.models import BottleRecord

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"
CHUNK_SIZE = 64 * 1024


class BottleFetcher(HttpClientMixin, BaseFetcher):
    """Fetch bottles over plain HTTP(S) GET.

    At most one fetch per target filename is in flight at a time. A
    caller that waited on another fetch of the same file and finds it
    complete gets success without a second download.

    Attributes:
        hosts: Mapping of host key to base URL.
        verify: Check the sha256 of each body against the record's hash.
    """

    def __init__(
        self,
        hosts: Mapping[str, str],
        verify: bool = False,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the fetcher.

        Args:
            hosts: Mapping of host key to base URL.
            verify: Reject bodies whose sha256 differs from the record's hash.
            timeout: Total timeout in seconds for one download.
        """
        super().__init__(timeout=timeout)
        self.hosts = hosts
        self.verify = verify
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def name(self) -> str:
        return "HTTP"

    def url_for(self, record: BottleRecord) -> Optional[str]:
        """Return the download URL for a record, or None for an unknown host."""
        base = self.hosts.get(record.host)
        if base is None:
            return None
        return f"{base}/{record.filename}"

    def _lock_for(self, filename: str) -> asyncio.Lock:
        lock = self._locks.get(filename)
        if lock is None:
            lock = self._locks[filename] = asyncio.Lock()
        return lock

    async def fetch(self, record: BottleRecord, dest_dir: Path) -> bool:
        """Download a bottle into ``dest_dir``.

        Args:
            record: Hosted bottle to fetch.
            dest_dir: Destination directory (must exist).

        Returns:
            True if the complete bottle is now at ``dest_dir / record.filename``.
        """
        url = self.url_for(record)
        if url is None:
            logger.error(
                "Unknown host '%s' for bottle %s", record.host, record.filename
            )
            return False

        target = dest_dir / record.filename

        async with self._lock_for(record.filename):
            if target.is_file() and target.stat().st_size > 0:
                logger.debug("'%s' already fetched", record.filename)
                return True

            logger.info("Downloading '%s'", url)
            return await self._download(url, record, target)

    async def _download(self, url: str, record: BottleRecord, target: Path) -> bool:
        """Stream ``url`` into a ``.part`` file and rename it onto ``target``.

        The partial file is removed on every path that does not end with the
        rename, cancellation included.
        """
        partial = target.with_name(target.name + PARTIAL_SUFFIX)
        complete = False
        try:
            session = await self._get_session()
            async with session.get(url) as response:
                if not 200 <= response.status < 300:
                    logger.warning(
                        "Download of %s failed with status %d", url, response.status
                    )
                    return False
                # Leftover from an interrupted run
                partial.unlink(missing_ok=True)
                size, digest = await self._stream(response, partial)

            if size == 0:
                logger.warning("Download of %s returned an empty body", url)
                return False

            if digest is not None and digest != record.hash.strip().lower():
                logger.warning(
                    "Checksum mismatch for %s: expected %s, got %s",
                    record.filename,
                    record.hash,
                    digest,
                )
                return False

            partial.replace(target)
            complete = True

        except aiohttp.ClientError as e:
            logger.warning("Network error downloading %s: %s", url, e)
        except asyncio.TimeoutError:
            logger.warning("Timed out after %ss downloading %s", self.timeout, url)
        except OSError as e:
            logger.error("Failed to write %s: %s", target, e)
        finally:
            if not complete:
                partial.unlink(missing_ok=True)
        return complete

    async def _stream(
        self, response: aiohttp.ClientResponse, partial: Path
    ) -> tuple[int, Optional[str]]:
        """Write the response body to ``partial`` chunk by chunk.

        Returns:
            Number of bytes written and, when verifying, the body's sha256.
        """
        hasher = hashlib.sha256() if self.verify else None
        size = 0
        with open(partial, "xb") as f:
            async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                f.write(chunk)
                if hasher is not None:
                    hasher.update(chunk)
                size += len(chunk)
        return size, hasher.hexdigest() if hasher is not None else None
