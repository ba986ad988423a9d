"""Canonical bottle filename derivation.

Bottle filenames must be byte-identical to the names listed in the bottle
manifest, otherwise a hosted bottle is silently reported as missing. All
naming quirks live here.
"""

import re
from collections.abc import Iterable, Iterator
from typing import Optional

from bottle_wrangler.constants import CURRENT_LLVM_VERSION, LLVM_VERSION_PLACEHOLDER
from bottle_wrangler.models import Formula

_PATH_PREFIX = re.compile(r".*/")
_ARCHIVE_SUFFIX = re.compile(r"\.tar.*")
_NAME_PREFIX = re.compile(r"^[a-zA-Z\-]*")
_V2_PREFIX = re.compile(r"^2-")


class MissingVersionError(ValueError):
    """Raised when a formula has no usable version for a bottle filename."""

    def __init__(self, formula: Formula) -> None:
        super().__init__(
            f"Formula '{formula.name}' has no version and no URL to infer one from"
        )
        self.formula = formula


def extract_version(url: str) -> str:
    """Infer a version string from a source archive URL.

    Best-effort heuristic, not correct for every URL shape::

        https://ftp.gnu.org/gnu/autoconf/autoconf-2.69.tar.gz -> 2.69
        https://github.com/miloyip/rapidjson/archive/v1.1.0.tar.gz -> 1.1.0

    Args:
        url: Source archive URL.

    Returns:
        The inferred version, possibly empty.
    """
    text = _PATH_PREFIX.sub("", url)
    text = _ARCHIVE_SUFFIX.sub("", text, count=1)
    text = _NAME_PREFIX.sub("", text, count=1)
    return _V2_PREFIX.sub("", text, count=1)


def substitute_version_placeholder(
    version: str, llvm_version: str = CURRENT_LLVM_VERSION
) -> str:
    """Replace the llvm version placeholder with the current toolchain version.

    Some llvm and libcpp definitions declare their version through a
    variable instead of a literal. Kept apart from the rest of the naming
    rules so it can be dropped on its own.
    """
    if LLVM_VERSION_PLACEHOLDER in version:
        return llvm_version
    return version


def derive_filename(
    formula: Formula, distro: str, llvm_version: str = CURRENT_LLVM_VERSION
) -> str:
    """Build the canonical bottle filename for a formula and distro.

    Format: ``<name>-<version>[_<revision>].<distro>.bottle[.<rebuild>].tar.gz``

    Args:
        formula: Formula to name a bottle for.
        distro: Target distro tag (e.g., "x86_64_linux", "mojave").
        llvm_version: Version substituted for the llvm placeholder.

    Returns:
        The bottle filename.

    Raises:
        MissingVersionError: If the formula has no version.
    """
    if not formula.version:
        raise MissingVersionError(formula)

    version = substitute_version_placeholder(formula.version, llvm_version)

    filename = f"{formula.name}-{version}"
    if formula.revision is not None:
        filename += f"_{formula.revision}"
    filename += f".{distro}.bottle"
    if formula.rebuild is not None:
        filename += f".{formula.rebuild}"
    return filename + ".tar.gz"


def candidate_filenames(
    formula: Formula,
    distros: Iterable[str],
    llvm_version: Optional[str] = None,
) -> Iterator[tuple[str, str]]:
    """Yield (distro, filename) for each acceptable distro, in order."""
    for distro in distros:
        yield distro, derive_filename(
            formula, distro, llvm_version or CURRENT_LLVM_VERSION
        )
