"""Base interface for input scanners.

Scanners read the static inputs of a run (formula definitions, the bottle
manifest, per-platform manifests) and turn them into typed records.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class BaseScanner(ABC, Generic[T]):
    """Abstract base class for input scanners.

    A missing or unreadable source is fatal and raised to the caller; a
    malformed line or row inside a readable source is skipped.

    Attributes:
        source_path: Path to the file or directory being scanned.
    """

    def __init__(self, source_path: Optional[Path] = None) -> None:
        """Initialize the scanner.

        Args:
            source_path: Path to the source file or directory.
        """
        self.source_path = source_path

    @abstractmethod
    def scan(self) -> T:
        """Scan the source and return its parsed contents.

        Raises:
            FileNotFoundError: If the source does not exist.
            ValueError: If source_path is not set.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return a human-readable name for this scanner's source type."""
        ...

    def _require_source(self) -> Path:
        """Return source_path, raising if it is unset or does not exist."""
        if self.source_path is None:
            raise ValueError("source_path must be provided")

        if not self.source_path.exists():
            raise FileNotFoundError(
                f"{self.source_name} not found: {self.source_path}"
            )
        return self.source_path
