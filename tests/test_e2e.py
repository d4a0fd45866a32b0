from __future__ import annotations

# pylint: disable=redefined-outer-name

import logging
from datetime import date
from pathlib import Path

import pytest

from carrierview.config import ViewerConfig
from carrierview.exceptions import CarrierViewError, ResourceFetchError, SnapshotDecodeError
from carrierview.startup import StartupOrigin
from carrierview.storage import MemoryStorage
from carrierview.viewer import CarrierViewer

PAGE_URL = "https://viewer.example.org/"


class FakeCsvServer:
    """Fetcher double serving one CSV and counting requests."""

    def __init__(self, text: str, *, fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls: list[str] = []

    async def fetch_text(self, source: str) -> str:
        self.calls.append(source)
        if self.fail:
            raise ResourceFetchError(f"HTTP 503 from {source}", source=source, status_code=503)
        return self.text


@pytest.fixture
def config() -> ViewerConfig:
    return ViewerConfig(csv_source="https://data.example.org/data.csv", page_url=PAGE_URL)


@pytest.fixture
def server(scenario_csv: str) -> FakeCsvServer:
    return FakeCsvServer(scenario_csv)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_fresh_start_edit_save_share_and_reopen(config: ViewerConfig, server: FakeCsvServer) -> None:
    storage = MemoryStorage()
    copied: list[str] = []

    async with CarrierViewer(config, storage=storage, fetcher=server, clipboard=copied.append) as viewer:
        result = await viewer.start(PAGE_URL)
        assert result.origin == StartupOrigin.CSV
        assert result.record_count == 2
        assert result.errors == []
        assert viewer.store.chart_series.labels == ["Mar 2021"]
        assert viewer.store.chart_series.counts == [1]

        assert viewer.edit_out_of_service_date(1, date(2021, 4, 2)) is True
        assert viewer.store.chart_series.labels == ["Mar 2021", "Apr 2021"]
        viewer.set_settings({"rows": ["entity_type"], "cols": []})

        await viewer.save()
        link = await viewer.share_link()
        expected = viewer.store.snapshot()

    assert server.calls == ["https://data.example.org/data.csv"]
    assert copied == [link]

    # A page opened with the share link never touches the CSV.
    reopened_server = FakeCsvServer("")
    async with CarrierViewer(config, fetcher=reopened_server) as viewer:
        result = await viewer.start(link)
        assert result.origin == StartupOrigin.SHARED_LINK
        assert viewer.store.snapshot() == expected
        assert viewer.store.record(1).out_of_service_date == "04/02/2021"
    assert reopened_server.calls == []

    # Explicit load restores the saved state over a fresh one.
    async with CarrierViewer(config, storage=storage, fetcher=FakeCsvServer(server.text)) as viewer:
        await viewer.start(PAGE_URL)
        assert viewer.store.chart_series.labels == ["Mar 2021"]
        assert await viewer.load() is True
        assert viewer.store.snapshot() == expected

        await viewer.reset()
        assert await viewer.load() is False


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_malformed_share_link_falls_back_to_csv(
    config: ViewerConfig, server: FakeCsvServer, caplog: pytest.LogCaptureFixture
) -> None:
    async with CarrierViewer(config, fetcher=server) as viewer:
        with caplog.at_level(logging.ERROR, logger="carrierview.startup"):
            result = await viewer.start(f"{PAGE_URL}?settings=%7Bbroken")

    assert result.origin == StartupOrigin.CSV
    assert result.record_count == 2
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], SnapshotDecodeError)
    assert "Ignoring shared link" in caplog.text
    assert server.calls == [config.csv_source]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_fetch_failure_is_fatal(config: ViewerConfig) -> None:
    async with CarrierViewer(config, fetcher=FakeCsvServer("", fail=True)) as viewer:
        with pytest.raises(ResourceFetchError) as excinfo:
            await viewer.start(PAGE_URL)

    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_restore_saved_on_startup(tmp_path: Path, server: FakeCsvServer) -> None:
    config = ViewerConfig(
        csv_source="https://data.example.org/data.csv",
        storage_path=tmp_path / "store.json",
        restore_saved_on_startup=True,
    )

    async with CarrierViewer(config, fetcher=server) as viewer:
        first = await viewer.start()
        viewer.edit_field(0, "legal_name", "Acme Renamed")
        await viewer.save()
    assert first.origin == StartupOrigin.CSV

    async with CarrierViewer(config, fetcher=server) as viewer:
        second = await viewer.start()
        assert second.origin == StartupOrigin.SAVED
        assert viewer.store.record(0).legal_name == "Acme Renamed"
        await viewer.reset()

    async with CarrierViewer(config, fetcher=server) as viewer:
        third = await viewer.start()
    assert third.origin == StartupOrigin.CSV
    assert len(server.calls) == 2


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_corrupt_saved_snapshot_is_reported_and_skipped(server: FakeCsvServer) -> None:
    config = ViewerConfig(csv_source="data.csv", restore_saved_on_startup=True)
    storage = MemoryStorage({"tableSettings": '{"records": "nope"}'})

    async with CarrierViewer(config, storage=storage, fetcher=server) as viewer:
        result = await viewer.start()

    assert result.origin == StartupOrigin.CSV
    assert isinstance(result.errors[0], SnapshotDecodeError)


@pytest.mark.asyncio
async def test_pivot_uses_settings_axes(config: ViewerConfig, server: FakeCsvServer) -> None:
    async with CarrierViewer(config, fetcher=server) as viewer:
        await viewer.start()
        viewer.set_settings({"rows": ["legal_name"], "cols": ["entity_type"]})
        table = viewer.pivot()

        assert table.row_keys == [("Acme Inc",), ("Beta LLC",)]
        assert table.count(("Beta LLC",), ("CARRIER",)) == 1

        viewer.set_settings({"rows": "legal_name"})
        with pytest.raises(ValueError):
            viewer.pivot()


@pytest.mark.asyncio
async def test_start_outside_context_manager_is_rejected(config: ViewerConfig) -> None:
    viewer = CarrierViewer(config)

    with pytest.raises(CarrierViewError):
        await viewer.start()


@pytest.mark.asyncio
async def test_reads_local_csv_through_default_transport(tmp_path: Path, scenario_csv: str) -> None:
    path = tmp_path / "data.csv"
    path.write_text(scenario_csv, encoding="utf-8")

    async with CarrierViewer(ViewerConfig(csv_source=str(path))) as viewer:
        result = await viewer.start()

    assert result.record_count == 2
