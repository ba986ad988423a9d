"""Fallback for formulas with no bottle available.

Formulas that end Missing are handed here. Without a brew executable the
fallback only reports them; with one it asks brew to build each bottle.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from bottle_wrangler.models import Formula

logger = logging.getLogger(__name__)


class BuildFallback:
    """Builds bottles locally for formulas that could not be fetched.

    Attributes:
        brew: Path to the brew executable, or None to only report.
    """

    def __init__(self, brew: Optional[Path] = None) -> None:
        self.brew = brew

    def command_for(self, formula: Formula) -> list[str]:
        """Return the build command line for a formula."""
        return [str(self.brew), "bottle", "--skip-relocation", formula.name]

    def build(self, formula: Formula) -> bool:
        """Build one bottle.

        Returns:
            True if the build ran and succeeded, False otherwise (including
            when no brew executable is configured).
        """
        if self.brew is None:
            logger.debug("No brew configured, not building %s", formula.name)
            return False

        command = self.command_for(formula)
        logger.info("Running %s", " ".join(command))
        try:
            subprocess.run(command, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            logger.error("Building bottle %s failed: %s", formula.name, e)
            return False
        return True

