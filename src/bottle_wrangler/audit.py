"""Manifest audit: expected bottle rows for every declared bottle hash.

Renders ``<host>,<filename>,<sha>`` rows for each (distro, sha) declared in
the formula definitions, ready to paste into the bottle manifest, and
flags rows whose bottle is absent from a bucket listing.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from bottle_wrangler.constants import CURRENT_LLVM_VERSION, DEFAULT_HOST_KEY
from bottle_wrangler.models import Formula
from bottle_wrangler.naming import MissingVersionError, derive_filename

logger = logging.getLogger(__name__)

MISSING_MARKER = "_MISSING,--^^^^--"


@dataclass(frozen=True)
class AuditRow:
    """One declared bottle and whether the host listing has it.

    Attributes:
        host: Host key written into the row.
        filename: Derived bottle filename.
        hash: Declared sha256.
        listed: False when a listing was checked and lacks the filename,
            True otherwise.
    """

    host: str
    filename: str
    hash: str
    listed: bool = True

    def to_csv(self) -> str:
        return f"{self.host},{self.filename},{self.hash}"


def audit_formulas(
    formulas: Iterable[Formula],
    listing: Optional[set[str]] = None,
    host: str = DEFAULT_HOST_KEY,
    llvm_version: str = CURRENT_LLVM_VERSION,
) -> list[AuditRow]:
    """Build manifest rows for every declared bottle hash.

    Formulas without a version cannot be named; they are logged and skipped.

    Args:
        formulas: Formulas to audit.
        listing: Filenames the host serves; None skips the presence check.
        host: Host key for the generated rows.
        llvm_version: Version substituted for the llvm placeholder.

    Returns:
        Rows in formula order, then declaration order.
    """
    rows = []
    for formula in formulas:
        for distro, sha in formula.bottle_hashes:
            try:
                filename = derive_filename(formula, distro, llvm_version)
            except MissingVersionError as e:
                logger.warning("Skipping bottle rows: %s", e)
                break
            listed = listing is None or filename in listing
            rows.append(AuditRow(host=host, filename=filename, hash=sha, listed=listed))
    return rows


def render_rows(rows: Iterable[AuditRow]) -> list[str]:
    """Render audit rows as manifest lines, each missing row followed by a marker."""
    lines = []
    for row in rows:
        lines.append(row.to_csv())
        if not row.listed:
            lines.append(MISSING_MARKER)
    return lines
