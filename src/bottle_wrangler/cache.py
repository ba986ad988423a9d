"""Local bottle cache backed by the destination directory.

Bottles already present in the destination directory are reused instead
of being downloaded again. A zero-length file is the leftover of an
interrupted download and is evicted when probed.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from bottle_wrangler.constants import ALL_DISTROS, CURRENT_LLVM_VERSION
from bottle_wrangler.models import Formula
from bottle_wrangler.naming import candidate_filenames

logger = logging.getLogger(__name__)

BOTTLE_GLOB = "*.bottle*.tar.gz"


class BottleCache:
    """Probe and maintain the bottle destination directory.

    Attributes:
        dest_dir: Directory holding downloaded bottles.
        llvm_version: Version substituted for the llvm placeholder when
            deriving candidate filenames.
    """

    def __init__(
        self,
        dest_dir: Path,
        llvm_version: str = CURRENT_LLVM_VERSION,
    ) -> None:
        """Initialize the cache.

        Args:
            dest_dir: Directory holding downloaded bottles.
            llvm_version: Tool version for placeholder substitution.
        """
        self.dest_dir = dest_dir
        self.llvm_version = llvm_version

    def ensure(self) -> None:
        """Create the destination directory if it does not exist."""
        self.dest_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        """Return the local path a bottle filename is stored at."""
        return self.dest_dir / filename

    def find_cached(self, formula: Formula, distros: Iterable[str]) -> Optional[Path]:
        """Find a non-empty cached bottle for any acceptable distro.

        Zero-length candidates are deleted and the probe moves on to the
        next distro.

        Args:
            formula: Formula to probe for.
            distros: Acceptable distro tags, in preference order.

        Returns:
            Path of the first non-empty cached bottle, or None.

        Raises:
            MissingVersionError: If the formula has no version.
        """
        for _, filename in candidate_filenames(formula, distros, self.llvm_version):
            path = self.path_for(filename)
            if not path.is_file():
                continue
            if path.stat().st_size == 0:
                logger.info("Removing empty cached bottle %s", path)
                path.unlink(missing_ok=True)
                continue
            logger.debug("'%s' is cached", filename)
            return path
        return None

    def is_cached(self, formula: Formula, distros: Iterable[str]) -> bool:
        """Return True if a non-empty bottle for the formula is cached."""
        return self.find_cached(formula, distros) is not None

    def bottles(self) -> list[Path]:
        """Return the bottle files currently in the destination directory."""
        if not self.dest_dir.is_dir():
            return []
        return sorted(p for p in self.dest_dir.glob(BOTTLE_GLOB) if p.is_file())

    def clear(
        self,
        formula: Optional[Formula] = None,
        distros: Iterable[str] = ALL_DISTROS,
    ) -> int:
        """Delete cached bottles.

        Args:
            formula: If given, only delete this formula's bottles, matched by
                exact filename for each of ``distros``.
            distros: Distros whose filenames are cleared for ``formula``.

        Returns:
            Number of files deleted.

        Raises:
            MissingVersionError: If ``formula`` has no version.
        """
        if formula is None:
            targets = self.bottles()
        else:
            targets = [
                self.path_for(filename)
                for _, filename in candidate_filenames(
                    formula, distros, self.llvm_version
                )
            ]

        removed = 0
        for path in targets:
            if not path.is_file():
                continue
            path.unlink(missing_ok=True)
            removed += 1
        logger.debug("Removed %d bottles from %s", removed, self.dest_dir)
        return removed

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - path: Destination directory
                - count: Number of cached bottles
                - size_bytes: Total size of cached bottles
        """
        bottles = self.bottles()
        return {
            "path": str(self.dest_dir),
            "count": len(bottles),
            "size_bytes": sum(p.stat().st_size for p in bottles),
        }
