from __future__ import annotations

import logging
from datetime import date

import pytest

from carrierview.aggregation import LabelOrder, aggregate
from carrierview.models.chart import ChartSeries
from carrierview.models.record import RowRecord
from carrierview.models.snapshot import Snapshot
from carrierview.state.store import ViewStateStore


def test_initial_chart_is_derived_from_records(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)

    assert store.chart_series == aggregate(records)
    assert len(store) == 4


def test_edit_field_changes_only_target_record(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)
    before = store.records

    assert store.edit_field(1, "out_of_service_date", "2021-03-01") is True

    after = store.records
    assert after[1].out_of_service_date == "2021-03-01"
    assert after[1].model_dump(exclude={"out_of_service_date"}) == before[1].model_dump(
        exclude={"out_of_service_date"}
    )
    for index in (0, 2, 3):
        assert after[index] == before[index]
    assert store.chart_series.labels == ["Mar 2021", "Jan 2020"]
    assert store.chart_series.counts == [3, 1]


def test_edit_field_out_of_range_is_noop(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)
    before = store.snapshot()

    assert store.edit_field(4, "legal_name", "Nobody") is False
    assert store.edit_field(-1, "legal_name", "Nobody") is False

    assert store.snapshot() == before


def test_edit_field_rejects_unknown_field(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)

    with pytest.raises(ValueError, match="unknown field"):
        store.edit_field(0, "vin", "X")


def test_edit_out_of_service_date_writes_editor_format(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)

    store.edit_out_of_service_date(0, date(2022, 7, 4))
    assert store.record(0).out_of_service_date == "07/04/2022"
    assert "Jul 2022" in store.chart_series.labels

    store.edit_out_of_service_date(0, None)
    assert store.record(0).out_of_service_date == ""
    assert "Jul 2022" not in store.chart_series.labels


def test_set_records_replaces_and_reaggregates(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)

    store.set_records([{"legal_name": "Solo", "out_of_service_date": "2020-05-05"}])

    assert len(store) == 1
    assert store.chart_series.labels == ["May 2020"]


def test_readers_get_copies(records: list[RowRecord]) -> None:
    store = ViewStateStore(records, {"rows": ["entity_type"]})

    store.records[0].legal_name = "Changed"
    store.settings["rows"].append("legal_name")

    assert store.record(0).legal_name == "Acme Inc"
    assert store.settings == {"rows": ["entity_type"]}


def test_chart_reads_and_snapshots_are_detached(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)

    snap = store.snapshot()
    snap.chart_series.labels.append("Bogus 1999")
    snap.chart_series.datasets[0].data.append(99)
    store.chart_series.labels.clear()
    store.chart_series.datasets[0].data.clear()

    assert store.chart_series == aggregate(store.records)
    assert store.chart_series.labels == ["Mar 2021", "Jan 2020"]
    assert store.chart_series.counts == [2, 1]


def test_set_settings_replaces_wholesale(records: list[RowRecord]) -> None:
    store = ViewStateStore(records, {"a": 1})

    store.set_settings({"b": {"nested": True}})

    assert store.settings == {"b": {"nested": True}}


def test_restore_rederives_stale_chart(records: list[RowRecord], caplog: pytest.LogCaptureFixture) -> None:
    store = ViewStateStore()
    stale = Snapshot(records=records, chart_series=ChartSeries.from_counts(["Jan 1999"], [7]), settings={"x": 1})

    with caplog.at_level(logging.WARNING, logger="carrierview.state.store"):
        store.restore(stale)

    assert store.chart_series == aggregate(records)
    assert store.settings == {"x": 1}
    assert "does not match" in caplog.text


def test_chronological_store(records: list[RowRecord]) -> None:
    store = ViewStateStore(records, label_order=LabelOrder.CHRONOLOGICAL)

    assert store.chart_series.labels == ["Jan 2020", "Mar 2021"]


def test_subscribers_are_notified_until_unsubscribed(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)
    seen: list[list[str]] = []
    unsubscribe = store.subscribe(lambda s: seen.append(s.chart_series.labels))

    store.edit_field(1, "out_of_service_date", "2019-12-01")
    store.set_settings({})
    unsubscribe()
    store.edit_field(1, "out_of_service_date", "")

    assert seen == [["Mar 2021", "Dec 2019", "Jan 2020"], ["Mar 2021", "Dec 2019", "Jan 2020"]]


def test_failing_subscriber_does_not_block_mutation(records: list[RowRecord]) -> None:
    store = ViewStateStore(records)

    def boom(_store: ViewStateStore) -> None:
        raise RuntimeError("render failed")

    store.subscribe(boom)

    assert store.edit_field(0, "legal_name", "Renamed") is True
    assert store.record(0).legal_name == "Renamed"
