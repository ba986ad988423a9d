"""Immutable configuration bundle for a resolution run."""

from dataclasses import dataclass
from pathlib import Path

from bottle_wrangler.constants import CURRENT_LLVM_VERSION, DEFAULT_MAX_CONCURRENCY
from bottle_wrangler.index import AvailabilityIndex, FormulaIndex


@dataclass(frozen=True)
class WranglerConfig:
    """Everything the resolver needs, built once at startup.

    Attributes:
        formulas: Parsed formula definitions.
        availability: Hosted bottles and host registry.
        dest_dir: Destination directory for downloaded bottles.
        distros: Acceptable distro tags, in preference order.
        llvm_version: Version substituted for the llvm placeholder.
        verify: Check sha256 of downloaded bottles.
        max_concurrency: Maximum number of formulas resolved at once.
    """

    formulas: FormulaIndex
    availability: AvailabilityIndex
    dest_dir: Path
    distros: tuple[str, ...]
    llvm_version: str = CURRENT_LLVM_VERSION
    verify: bool = False
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY

    def __post_init__(self) -> None:
        if not self.distros:
            raise ValueError("At least one distro is required")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
