"""Scanner for per-platform formula manifests (``<platform>-formulas.csv``)."""

import csv
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from bottle_wrangler.constants import COMMENT_MARKER, DEFAULT_FORMULA_TYPES
from bottle_wrangler.scanners.base import BaseScanner

logger = logging.getLogger(__name__)


class PlatformManifestScanner(BaseScanner[list[str]]):
    """Scanner listing the formulas a platform needs.

    Rows are ``<type>,<name>,...``; only rows whose type is one of the
    requested tags are kept. Duplicate names are returned as listed.
    """

    def __init__(
        self,
        source_path: Optional[Path] = None,
        types: Iterable[str] = DEFAULT_FORMULA_TYPES,
    ) -> None:
        super().__init__(source_path)
        self.types = frozenset(types)

    @classmethod
    def for_platform(
        cls,
        provision_dir: Path,
        platform: str,
        types: Iterable[str] = DEFAULT_FORMULA_TYPES,
    ) -> "PlatformManifestScanner":
        """Create a scanner for ``<provision_dir>/<platform>-formulas.csv``."""
        return cls(provision_dir / f"{platform}-formulas.csv", types=types)

    @property
    def source_name(self) -> str:
        return "platform manifest"

    def scan(self) -> list[str]:
        """Return the needed formula names in manifest order.

        Raises:
            FileNotFoundError: If the manifest does not exist.
        """
        path = self._require_source()
        names: list[str] = []

        with open(path, "r", encoding="utf-8", newline="") as f:
            for row in csv.reader(f):
                cells = [cell.strip() for cell in row]
                if len(cells) <= 1 or cells[0].startswith(COMMENT_MARKER):
                    continue
                if cells[0] not in self.types:
                    continue
                names.append(cells[1])

        logger.debug("Platform manifest %s lists %d formulas", path, len(names))
        return names
