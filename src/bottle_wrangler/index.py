"""Read-only lookup tables built once at startup.

FormulaIndex holds parsed formulas keyed by name; AvailabilityIndex holds
the host registry and the hosted bottle records from the bottle manifest.
"""

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Optional

from bottle_wrangler.models import BottleRecord, Formula


class FormulaIndex:
    """Formulas keyed by name, in load order.

    When two formulas share a name, the first one loaded is kept.
    """

    def __init__(self, formulas: Iterable[Formula] = ()) -> None:
        table: dict[str, Formula] = {}
        for formula in formulas:
            table.setdefault(formula.name, formula)
        self._formulas: Mapping[str, Formula] = MappingProxyType(table)

    def get(self, name: str) -> Optional[Formula]:
        """Return the formula called ``name``, or None."""
        return self._formulas.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._formulas

    def __iter__(self) -> Iterator[Formula]:
        return iter(self._formulas.values())

    def __len__(self) -> int:
        return len(self._formulas)


class AvailabilityIndex:
    """Hosted bottles and the hosts that serve them.

    Attributes:
        hosts: Read-only mapping of host key to base URL.
        records: All bottle records in manifest order, duplicates included.
    """

    def __init__(
        self,
        hosts: Optional[Mapping[str, str]] = None,
        records: Iterable[BottleRecord] = (),
    ) -> None:
        self.hosts: Mapping[str, str] = MappingProxyType(dict(hosts or {}))
        self.records: tuple[BottleRecord, ...] = tuple(records)

        by_filename: dict[str, list[BottleRecord]] = {}
        for record in self.records:
            by_filename.setdefault(record.filename, []).append(record)
        self._by_filename = by_filename

    def lookup(self, filename: str) -> Optional[BottleRecord]:
        """Find a hosted bottle by exact filename.

        Args:
            filename: Canonical bottle filename.

        Returns:
            The first record listed for that filename, or None.
        """
        matches = self._by_filename.get(filename)
        return matches[0] if matches else None

    def lookup_all(self, filename: str) -> list[BottleRecord]:
        """Return every record for a filename, one per listing, in manifest order."""
        return list(self._by_filename.get(filename, ()))

    def __contains__(self, filename: object) -> bool:
        return filename in self._by_filename

    def __len__(self) -> int:
        return len(self.records)
