"""In-memory view state store.

Keeps ``chart_series == aggregate(records)`` after every mutation by
re-aggregating synchronously; there is no window in which a reader sees
a stale chart.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date
from typing import Any

from carrierview._constants import FIELD_NAMES, OUT_OF_SERVICE_FIELD
from carrierview._redact import summarize_for_log
from carrierview.aggregation import LabelOrder, aggregate, format_edit_date
from carrierview.models.chart import ChartSeries
from carrierview.models.record import RowRecord
from carrierview.models.snapshot import Snapshot

_logger = logging.getLogger(__name__)

StateListener = Callable[["ViewStateStore"], None]


def _as_record(value: RowRecord | Mapping[str, Any]) -> RowRecord:
    if isinstance(value, RowRecord):
        return value.model_copy()
    return RowRecord.model_validate(dict(value))


class ViewStateStore:
    """Records, chart series and view settings of one viewer session.

    Readers get copies; the only way to change state is through the
    mutation methods, each of which re-derives the chart and then notifies
    subscribers.
    """

    def __init__(
        self,
        records: Iterable[RowRecord | Mapping[str, Any]] = (),
        settings: Mapping[str, Any] | None = None,
        *,
        label_order: LabelOrder = LabelOrder.FIRST_SEEN,
    ) -> None:
        self._label_order = LabelOrder(label_order)
        self._records: list[RowRecord] = [_as_record(record) for record in records]
        self._settings: dict[str, Any] = copy.deepcopy(dict(settings or {}))
        self._chart_series: ChartSeries = aggregate(self._records, order=self._label_order)
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def records(self) -> list[RowRecord]:
        return [record.model_copy() for record in self._records]

    @property
    def chart_series(self) -> ChartSeries:
        return self._chart_series.model_copy(deep=True)

    @property
    def settings(self) -> dict[str, Any]:
        return copy.deepcopy(self._settings)

    @property
    def label_order(self) -> LabelOrder:
        return self._label_order

    def __len__(self) -> int:
        return len(self._records)

    def record(self, row_index: int) -> RowRecord | None:
        """Copy of the record at *row_index*, or ``None`` when out of range."""
        if not 0 <= row_index < len(self._records):
            return None
        return self._records[row_index].model_copy()

    def snapshot(self) -> Snapshot:
        """Detached copy of the full state, ready to persist or share."""
        return Snapshot(
            records=self.records,
            chart_series=self.chart_series,
            settings=self.settings,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_records(self, new_records: Iterable[RowRecord | Mapping[str, Any]]) -> None:
        """Replace all records and re-derive the chart."""
        self._records = [_as_record(record) for record in new_records]
        self._changed()

    def edit_field(self, row_index: int, field_name: str, new_value: str) -> bool:
        """Set one field of one record in place.

        Returns ``False`` (and changes nothing) when *row_index* is out of
        range.  Raises :class:`ValueError` for a field that is not one of
        the record's columns.
        """
        if field_name not in FIELD_NAMES:
            raise ValueError(f"unknown field {field_name!r}; expected one of {', '.join(FIELD_NAMES)}")
        if not 0 <= row_index < len(self._records):
            _logger.debug("Ignoring edit of %s for row %d (have %d rows)", field_name, row_index, len(self._records))
            return False

        setattr(self._records[row_index], field_name, new_value)
        self._changed()
        return True

    def edit_out_of_service_date(self, row_index: int, day: date | None) -> bool:
        """Store *day* as ``MM/DD/YYYY`` (or clear it with ``None``)."""
        value = format_edit_date(day) if day is not None else ""
        return self.edit_field(row_index, OUT_OF_SERVICE_FIELD, value)

    def set_settings(self, new_settings: Mapping[str, Any]) -> None:
        """Replace the view settings wholesale."""
        self._settings = copy.deepcopy(dict(new_settings))
        self._notify()

    def restore(self, snapshot: Snapshot) -> None:
        """Replace records and settings from a snapshot.

        The chart is always re-derived from the restored records; a stored
        chart that disagrees with them is logged and discarded.
        """
        self._records = [record.model_copy() for record in snapshot.records]
        self._settings = copy.deepcopy(snapshot.settings)
        self._chart_series = aggregate(self._records, order=self._label_order)
        if snapshot.chart_series != self._chart_series:
            _logger.warning(
                "Stored chart series does not match restored records; re-derived (stored=%s)",
                summarize_for_log(snapshot.chart_series.model_dump(by_alias=True)),
            )
        self._notify()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* after every mutation.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _changed(self) -> None:
        self._chart_series = aggregate(self._records, order=self._label_order)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                _logger.warning("State listener %r failed", listener, exc_info=True)
