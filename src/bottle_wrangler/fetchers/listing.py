"""Bucket listing for auditing which bottles a host actually serves.

S3-style buckets answer a GET on the bucket root with an XML listing of
``<Key>`` elements; the bottle keys in that listing are the filenames the
host can serve.
"""

import asyncio
import logging
import posixpath
import re
from typing import Optional

import aiohttp

from bottle_wrangler.fetchers.http import HttpClientMixin

logger = logging.getLogger(__name__)

_KEY_TAG = re.compile(r"</?Key>")
_BOTTLE_KEY = re.compile(r"bottle.*\.tar")
_BOTTLES_PATH = re.compile(r"/bottles.*")


def parse_listing(body: str) -> set[str]:
    """Extract bottle filenames from an S3 bucket listing document."""
    filenames = set()
    for part in _KEY_TAG.split(body):
        if "<" in part or ">" in part:
            continue
        if not _BOTTLE_KEY.search(part):
            continue
        filenames.add(posixpath.basename(part))
    return filenames


class BucketLister(HttpClientMixin):
    """Lists bottle filenames served by an S3 bucket."""

    @staticmethod
    def bucket_url(url: str) -> str:
        """Strip the ``/bottles...`` path from a host URL to get the bucket root."""
        return _BOTTLES_PATH.sub("", url)

    async def list_bottles(self, url: str) -> Optional[set[str]]:
        """Fetch the listing for the bucket behind ``url``.

        Args:
            url: Host base URL, e.g. ``https://example.s3.amazonaws.com/bottles``.

        Returns:
            Set of bottle filenames, or None if ``url`` is not an S3 URL or the
            listing could not be fetched.
        """
        if "s3" not in url:
            logger.warning("Not an S3 bucket URL, cannot list: %s", url)
            return None

        listing_url = self.bucket_url(url)
        logger.debug("Fetching bucket listing from %s", listing_url)

        try:
            session = await self._get_session()
            async with session.get(listing_url) as response:
                if response.status != 200:
                    logger.error(
                        "Bucket listing returned status %d for %s",
                        response.status,
                        listing_url,
                    )
                    return None
                body = await response.text()
        except aiohttp.ClientError as e:
            logger.error("Network error fetching bucket listing %s: %s", listing_url, e)
            return None
        except asyncio.TimeoutError:
            logger.error(
                "Timed out after %ss fetching bucket listing %s", self.timeout, listing_url
            )
            return None

        return parse_listing(body)
