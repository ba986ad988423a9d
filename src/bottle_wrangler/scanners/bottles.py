"""Scanner for the hosted bottle manifest.

The manifest is a CSV file mixing two row shapes::

    # comment
    HOST,osquery,https://osquery-packages.s3.amazonaws.com/bottles
    osquery,zlib-1.2.11.x86_64_linux.bottle.tar.gz,e1c2...
"""

import csv
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bottle_wrangler.constants import COMMENT_MARKER, HOST_ROW_MARKER
from bottle_wrangler.index import AvailabilityIndex
from bottle_wrangler.models import BottleRecord
from bottle_wrangler.scanners.base import BaseScanner

logger = logging.getLogger(__name__)


class RowKind(Enum):
    """Kinds of rows found in a bottle manifest."""

    HOST = "host"
    RECORD = "record"
    COMMENT = "comment"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ManifestRow:
    """A classified manifest row.

    Attributes:
        kind: Row kind.
        host: Host key (HOST and RECORD rows).
        value: Base URL for HOST rows, bottle filename for RECORD rows.
        hash: Declared sha256 for RECORD rows.
    """

    kind: RowKind
    host: Optional[str] = None
    value: Optional[str] = None
    hash: Optional[str] = None


def classify_row(row: list[str]) -> ManifestRow:
    """Classify a raw CSV row from the bottle manifest."""
    cells = [cell.strip() for cell in row]
    if len(cells) <= 1:
        return ManifestRow(RowKind.IGNORED)
    if cells[0].startswith(COMMENT_MARKER):
        return ManifestRow(RowKind.COMMENT)
    if len(cells) < 3:
        return ManifestRow(RowKind.IGNORED)
    if cells[0] == HOST_ROW_MARKER:
        return ManifestRow(RowKind.HOST, host=cells[1], value=cells[2])
    return ManifestRow(RowKind.RECORD, host=cells[0], value=cells[1], hash=cells[2])


class BottleManifestScanner(BaseScanner[AvailabilityIndex]):
    """Scanner for the hosted bottle list (``hosted-bottle-list.csv``)."""

    @property
    def source_name(self) -> str:
        return "bottle manifest"

    def scan(self) -> AvailabilityIndex:
        """Scan the manifest into an AvailabilityIndex.

        Later HOST rows for an already declared key replace the earlier URL.

        Returns:
            Index of hosts and hosted bottle records.

        Raises:
            FileNotFoundError: If the manifest does not exist.
        """
        path = self._require_source()

        hosts: dict[str, str] = {}
        records: list[BottleRecord] = []

        with open(path, "r", encoding="utf-8", newline="") as f:
            for line_num, row in enumerate(csv.reader(f), start=1):
                parsed = classify_row(row)
                if parsed.kind is RowKind.HOST:
                    hosts[parsed.host] = parsed.value
                elif parsed.kind is RowKind.RECORD:
                    records.append(
                        BottleRecord(
                            host=parsed.host, filename=parsed.value, hash=parsed.hash
                        )
                    )
                elif parsed.kind is RowKind.IGNORED and row:
                    logger.debug("Skipping manifest row %d: %s", line_num, row)

        logger.debug(
            "Loaded %d hosts and %d bottle records from %s",
            len(hosts),
            len(records),
            path,
        )
        return AvailabilityIndex(hosts=hosts, records=records)
