"""Scanner for formula definition directories.

Formula definitions are Ruby files, but only a handful of leading tokens
matter for bottle resolution, so they are scanned line by line rather
than parsed. Scanning of a file stops at its first ``end`` line.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from bottle_wrangler.constants import BUILD_ONLY_TAG
from bottle_wrangler.index import FormulaIndex
from bottle_wrangler.models import Formula
from bottle_wrangler.naming import extract_version
from bottle_wrangler.scanners.base import BaseScanner

logger = logging.getLogger(__name__)

_QUOTED = re.compile(r'"([^"]*)"')


class LineKind(Enum):
    """Recognized leading tokens of a formula definition line."""

    DESC = "desc"
    URL = "url"
    VERSION = "version"
    REVISION = "revision"
    REBUILD = "rebuild"
    DEPENDS_ON = "depends_on"
    SHA256 = "sha256"
    END = "end"
    IGNORED = None

    @classmethod
    def from_token(cls, token: str) -> "LineKind":
        try:
            return cls(token)
        except ValueError:
            return cls.IGNORED


@dataclass(frozen=True)
class ScannedLine:
    """One classified line: its kind and the text after the leading token."""

    kind: LineKind
    value: str = ""


def parse_line(line: str) -> ScannedLine:
    """Classify a raw definition line by its leading token."""
    parts = line.strip().split(None, 1)
    if not parts:
        return ScannedLine(LineKind.IGNORED)
    kind = LineKind.from_token(parts[0])
    value = parts[1].strip() if len(parts) == 2 else ""
    return ScannedLine(kind, value)


def _first_string(value: str) -> str:
    """Return the first double-quoted literal in value, or value itself."""
    match = _QUOTED.search(value)
    if match:
        return match.group(1)
    return value


@dataclass
class _FormulaDraft:
    """Mutable accumulator used while scanning a single file."""

    name: str
    fields: dict[str, str] = field(default_factory=dict)
    bottle_hashes: list[tuple[str, str]] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)

    def set_once(self, key: str, value: str) -> None:
        # Definitions repeat keys in conditional branches; the first one counts
        if value and key not in self.fields:
            self.fields[key] = value

    def freeze(self) -> Formula:
        return Formula(
            name=self.name,
            version=self.fields.get("version"),
            revision=self.fields.get("revision"),
            rebuild=self.fields.get("rebuild"),
            bottle_hashes=tuple(self.bottle_hashes),
            dependencies=tuple(self.dependencies),
            description=self.fields.get("desc"),
            url=self.fields.get("url"),
        )


class FormulaScanner(BaseScanner[list[Formula]]):
    """Scanner for a directory of ``<name>.rb`` formula definitions.

    Recognized lines::

        desc "Compression library"
        url "https://zlib.net/zlib-1.2.11.tar.gz"
        version "1.2.11"
        revision 2
        rebuild 1
        depends_on "cmake" => :build
        sha256 "e1c2..." => :x86_64_linux
        end

    When no version is declared, it is inferred from the url with
    :func:`bottle_wrangler.naming.extract_version`.
    """

    SUFFIX = ".rb"

    @property
    def source_name(self) -> str:
        return "formula directory"

    def scan(self) -> list[Formula]:
        """Scan every definition file in the directory, sorted by filename.

        Returns:
            Parsed formulas in filename order.

        Raises:
            FileNotFoundError: If the directory does not exist.
            NotADirectoryError: If the path is not a directory.
        """
        directory = self._require_source()
        if not directory.is_dir():
            raise NotADirectoryError(f"Not a formula directory: {directory}")

        formulas = []
        for path in sorted(directory.iterdir()):
            if not path.name.endswith(self.SUFFIX) or not path.is_file():
                continue
            formula = self.scan_file(path)
            if not formula.version:
                logger.warning(
                    "Formula %s has no version; no bottle filename can be derived",
                    formula.name,
                )
            formulas.append(formula)

        logger.debug("Loaded %d formulas from %s", len(formulas), directory)
        return formulas

    def scan_index(self) -> FormulaIndex:
        """Scan the directory and wrap the result in a FormulaIndex."""
        return FormulaIndex(self.scan())

    def scan_file(self, path: Path) -> Formula:
        """Scan a single definition file.

        Args:
            path: Path to ``<name>.rb``.

        Returns:
            The parsed formula.
        """
        draft = _FormulaDraft(name=path.name[: -len(self.SUFFIX)])

        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line_num, line in enumerate(f, start=1):
                scanned = parse_line(line)
                if scanned.kind is LineKind.END:
                    break
                self._apply(draft, scanned, path, line_num)

        formula = draft.freeze()
        if formula.version is None and formula.url:
            inferred = extract_version(formula.url)
            logger.debug(
                "Inferred version %r for %s from %s", inferred, formula.name, formula.url
            )
            formula = replace(formula, version=inferred or None)
        return formula

    def _apply(
        self, draft: _FormulaDraft, scanned: ScannedLine, path: Path, line_num: int
    ) -> None:
        kind, value = scanned.kind, scanned.value

        if kind is LineKind.IGNORED:
            return
        if kind is LineKind.DESC:
            draft.set_once("desc", _first_string(value))
        elif kind is LineKind.URL:
            draft.set_once("url", _first_string(value))
        elif kind is LineKind.VERSION:
            draft.set_once("version", value.replace('"', "").strip())
        elif kind is LineKind.REVISION:
            draft.set_once("revision", value)
        elif kind is LineKind.REBUILD:
            draft.set_once("rebuild", value)
        elif kind is LineKind.DEPENDS_ON:
            dependency = self._parse_dependency(value)
            if dependency:
                draft.dependencies.append(dependency)
        elif kind is LineKind.SHA256:
            pair = self._parse_bottle_hash(value)
            if pair is None:
                logger.debug("Skipping sha256 line %s:%d: %s", path, line_num, value)
            else:
                draft.bottle_hashes.append(pair)

    @staticmethod
    def _parse_dependency(value: str) -> Optional[str]:
        """Return the dependency name, or None for build-only dependencies."""
        name, _, tag = value.partition("=>")
        if tag and tag.strip() == BUILD_ONLY_TAG:
            return None
        return name.strip().replace('"', "") or None

    @staticmethod
    def _parse_bottle_hash(value: str) -> Optional[tuple[str, str]]:
        """Parse ``"<sha>" => :<distro>`` into (distro, sha)."""
        parts = value.split("=>")
        if len(parts) != 2:
            return None
        sha = parts[0].strip().replace('"', "")
        distro = parts[1].strip().replace(":", "")
        return distro, sha
