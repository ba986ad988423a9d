"""Core data models for bottle_wrangler.

This module defines the records shared by the scanners, the fetchers and
the resolver: parsed formulas, hosted bottle records and the per-formula
resolution outcome.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Formula:
    """Immutable metadata parsed from one formula definition file.

    Frozen so formulas can be shared between concurrent resolutions
    without copying.

    Attributes:
        name: Formula name, taken from the definition filename (e.g., "zlib").
        version: Declared or URL-inferred version (e.g., "1.2.11"). May be a
            placeholder such as "llvm_version", or None when neither the
            definition nor its URL yields one.
        revision: Optional formula revision appended to bottle filenames.
        rebuild: Optional bottle rebuild counter.
        bottle_hashes: Ordered (distro, sha256) pairs declared for bottles.
        dependencies: Runtime dependency names (build-only ones excluded).
        description: Optional description line.
        url: Optional source archive URL.
    """

    name: str
    version: Optional[str] = None
    revision: Optional[str] = None
    rebuild: Optional[str] = None
    bottle_hashes: tuple[tuple[str, str], ...] = ()
    dependencies: tuple[str, ...] = ()
    description: Optional[str] = None
    url: Optional[str] = None

    @property
    def summary(self) -> str:
        """Return a one-line description used in log and console output."""
        text = f"Formula name:{self.name} vers:{self.version}"
        if self.revision is not None:
            text += f" rev:{self.revision}"
        if self.rebuild is not None:
            text += f" rebuild:{self.rebuild}"
        return text

    def __str__(self) -> str:
        return self.summary


@dataclass(frozen=True)
class BottleRecord:
    """A bottle known to be hosted somewhere.

    Attributes:
        host: Symbolic host key, resolved to a base URL via the host registry.
        filename: Canonical bottle filename as stored on the host.
        hash: Declared sha256 digest of the bottle.
    """

    host: str
    filename: str
    hash: str

    def __str__(self) -> str:
        return f"Bottle filename:{self.filename}"


class ResolutionState(str, Enum):
    """Terminal state of one formula's resolution."""

    CACHED = "cached"
    DOWNLOADED = "downloaded"
    MISSING = "missing"
    UNKNOWN = "unknown"


@dataclass
class ResolutionOutcome:
    """Result of resolving a single needed formula name.

    Attributes:
        name: The requested formula name.
        state: Terminal state reached.
        formula: The formula, if the name was found in the index.
        filename: Bottle filename that is now present locally, if any.
        error: Reason recorded when resolution could not complete normally.
        attempted: Bottle filenames tried against the availability index.
    """

    name: str
    state: ResolutionState
    formula: Optional[Formula] = None
    filename: Optional[str] = None
    error: Optional[str] = None
    attempted: list[str] = field(default_factory=list)

    @property
    def is_missing(self) -> bool:
        """Return True if the formula needs a fallback build."""
        return self.state is ResolutionState.MISSING
