"""Base interface for bottle fetchers.

Fetchers retrieve one hosted bottle into the destination directory and
report whether a complete bottle is now present there.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from bottle_wrangler.models import BottleRecord


class BaseFetcher(ABC):
    """Abstract base class for bottle fetchers.

    Fetchers must never leave a non-empty partial file at the target path:
    on failure the target is either absent or zero-length.
    """

    @abstractmethod
    async def fetch(self, record: BottleRecord, dest_dir: Path) -> bool:
        """Fetch a bottle into ``dest_dir``.

        Args:
            record: Hosted bottle to fetch.
            dest_dir: Destination directory.

        Returns:
            True if the bottle is now present at ``dest_dir / record.filename``.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the fetcher name for logging/debugging."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
