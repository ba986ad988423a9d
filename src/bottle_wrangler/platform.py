"""Platform detection and distro mapping."""

import logging
import shlex
import subprocess

from bottle_wrangler.constants import DARWIN_DISTROS, LINUX_DISTROS

logger = logging.getLogger(__name__)


class PlatformError(RuntimeError):
    """Raised when the platform helper cannot report a platform."""


def get_platform(command: str) -> str:
    """Run the platform helper once and return the platform token it prints.

    Args:
        command: Helper command line, e.g. ``python3 ./get_platform.py --platform``.

    Returns:
        The stripped platform token (e.g., "darwin", "ubuntu").

    Raises:
        PlatformError: If the helper cannot be run, fails, or prints nothing.
    """
    logger.debug("Running platform helper: %s", command)
    try:
        result = subprocess.run(
            shlex.split(command),
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise PlatformError(f"Platform helper '{command}' failed: {e}") from e

    platform = result.stdout.strip()
    if not platform:
        raise PlatformError(f"Platform helper '{command}' printed no platform")
    return platform


def get_distros(platform: str) -> tuple[str, ...]:
    """Return the acceptable bottle distros for a platform, most preferred first."""
    if platform == "darwin":
        return DARWIN_DISTROS
    return LINUX_DISTROS
