"""Monthly out-of-service aggregation.

Turns row records into the bar chart series: one label per calendar
month (``"Mar 2021"``) with the number of records placed out of service
in that month.  Also hosts the explicit text conversions used at the
point of display (dates, USDOT numbers) so records themselves stay text.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date, datetime
from enum import StrEnum

from carrierview._constants import INVALID_DATE_LABEL, MONTH_ABBREVIATIONS
from carrierview.models.chart import ChartSeries
from carrierview.models.record import RowRecord

# Formats tried after ISO 8601.  "%m/%d/%Y" is what the date editor writes.
_DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
)

_INVALID_SORT_KEY = (1, 0, 0)


class LabelOrder(StrEnum):
    """Ordering of chart labels."""

    FIRST_SEEN = "first_seen"
    CHRONOLOGICAL = "chronological"


def parse_record_date(value: str | None) -> date | None:
    """Parse a record date field.

    Returns ``None`` for empty or unparseable text instead of raising.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_month_label(day: date) -> str:
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.year:04d}"


def month_label(value: str | None) -> str:
    """Month-year label for a date field, or ``"Invalid Date"``."""
    parsed = parse_record_date(value)
    if parsed is None:
        return INVALID_DATE_LABEL
    return format_month_label(parsed)


def format_edit_date(day: date) -> str:
    """Format a date the way the grid's date editor stores it (``MM/DD/YYYY``)."""
    return f"{day.month:02d}/{day.day:02d}/{day.year}"


def parse_usdot_number(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return int(result)


def aggregate(
    records: Iterable[RowRecord],
    *,
    order: LabelOrder = LabelOrder.FIRST_SEEN,
) -> ChartSeries:
    """Count records per out-of-service month.

    Records with an empty ``out_of_service_date`` are skipped; dates that
    cannot be parsed are counted under ``"Invalid Date"``.  With
    ``LabelOrder.FIRST_SEEN`` labels keep the order in which they first
    appear in *records*; ``LabelOrder.CHRONOLOGICAL`` sorts them by month
    with ``"Invalid Date"`` last.
    """
    counts: dict[str, int] = {}
    sort_keys: dict[str, tuple[int, int, int]] = {}
    for record in records:
        value = record.out_of_service_date
        if value == "":
            continue
        parsed = parse_record_date(value)
        if parsed is None:
            label = INVALID_DATE_LABEL
            sort_keys.setdefault(label, _INVALID_SORT_KEY)
        else:
            label = format_month_label(parsed)
            sort_keys.setdefault(label, (0, parsed.year, parsed.month))
        counts[label] = counts.get(label, 0) + 1

    labels = list(counts)
    if order == LabelOrder.CHRONOLOGICAL:
        labels.sort(key=sort_keys.__getitem__)
    return ChartSeries.from_counts(labels, [counts[label] for label in labels])
