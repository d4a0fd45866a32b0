"""Count cross-tabulation for the pivot view."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from carrierview._constants import FIELD_NAMES
from carrierview.models.record import RowRecord

PivotKey = tuple[str, ...]


@dataclass(frozen=True)
class PivotTable:
    """Record counts grouped by row attributes and column attributes."""

    rows: tuple[str, ...]
    cols: tuple[str, ...]
    row_keys: list[PivotKey] = field(default_factory=list)
    col_keys: list[PivotKey] = field(default_factory=list)
    counts: dict[tuple[PivotKey, PivotKey], int] = field(default_factory=dict)

    def count(self, row_key: PivotKey, col_key: PivotKey) -> int:
        return self.counts.get((row_key, col_key), 0)

    def row_total(self, row_key: PivotKey) -> int:
        return sum(self.count(row_key, col_key) for col_key in self.col_keys)

    def col_total(self, col_key: PivotKey) -> int:
        return sum(self.count(row_key, col_key) for row_key in self.row_keys)

    @property
    def grand_total(self) -> int:
        return sum(self.counts.values())


def _check_fields(names: Sequence[str]) -> tuple[str, ...]:
    unknown = [name for name in names if name not in FIELD_NAMES]
    if unknown:
        raise ValueError(f"unknown pivot field(s) {', '.join(map(repr, unknown))}")
    return tuple(names)


def pivot_counts(
    records: Iterable[RowRecord],
    rows: Sequence[str] = (),
    cols: Sequence[str] = (),
) -> PivotTable:
    """Count records for every (row key, column key) combination.

    Keys are the tuples of the records' values for *rows* and *cols*;
    both key lists keep first-seen order.  With no row (or column)
    attributes every record falls under the empty key ``()``.
    """
    row_fields = _check_fields(rows)
    col_fields = _check_fields(cols)

    row_keys: dict[PivotKey, None] = {}
    col_keys: dict[PivotKey, None] = {}
    counts: dict[tuple[PivotKey, PivotKey], int] = {}
    for record in records:
        row_key = tuple(getattr(record, name) for name in row_fields)
        col_key = tuple(getattr(record, name) for name in col_fields)
        row_keys.setdefault(row_key, None)
        col_keys.setdefault(col_key, None)
        counts[(row_key, col_key)] = counts.get((row_key, col_key), 0) + 1

    return PivotTable(
        rows=row_fields,
        cols=col_fields,
        row_keys=list(row_keys),
        col_keys=list(col_keys),
        counts=counts,
    )
