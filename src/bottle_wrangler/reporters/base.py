"""Base interface for resolution reporters.

Reporters render the outcomes of a resolution run (Markdown, etc.) so the
result can be archived with build logs.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from bottle_wrangler.models import ResolutionOutcome


class BaseReporter(ABC):
    """Abstract base class for resolution reporters."""

    @abstractmethod
    def render(
        self,
        outcomes: list[ResolutionOutcome],
        platform: str,
        distros: tuple[str, ...],
    ) -> str:
        """Render resolution outcomes to formatted output.

        Args:
            outcomes: Outcomes in resolution order.
            platform: Platform token the run was made for.
            distros: Acceptable distros used for the run.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(
        self,
        outcomes: list[ResolutionOutcome],
        output_path: Path,
        platform: str,
        distros: tuple[str, ...],
    ) -> None:
        """Render and write output to a file."""
        content = self.render(outcomes, platform, distros)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name (e.g., "markdown")."""
        ...
