"""High-level async facade over loading, view state and persistence."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

import aiohttp

from carrierview._transport import ResourceFetcher, TextResourceTransport
from carrierview.config import ViewerConfig
from carrierview.exceptions import CarrierViewError
from carrierview.persistence import Clipboard, PersistenceAdapter
from carrierview.pivot import PivotTable, pivot_counts
from carrierview.startup import StartupResult, bootstrap
from carrierview.state.store import ViewStateStore
from carrierview.storage import FileStorage, KeyValueStorage, MemoryStorage

_logger = logging.getLogger(__name__)


def _pivot_axis(settings: Mapping[str, Any], key: str) -> list[str]:
    value = settings.get(key)
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValueError(f"pivot setting {key!r} must be a list of field names, got {value!r}")
    return [str(item) for item in value]


class CarrierViewer:
    """Async entry point used by the presentation layer.

    Usage::

        async with CarrierViewer(ViewerConfig.from_env()) as viewer:
            await viewer.start(page_url)
            viewer.edit_out_of_service_date(0, date(2021, 3, 15))
            link = await viewer.share_link()
    """

    def __init__(
        self,
        config: ViewerConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        storage: KeyValueStorage | None = None,
        clipboard: Clipboard | None = None,
        fetcher: ResourceFetcher | None = None,
    ) -> None:
        self._config = config or ViewerConfig()
        self._external_session = session is not None
        self._http_session = session
        self._fetcher = fetcher
        if storage is None:
            if self._config.storage_path is not None:
                storage = FileStorage(self._config.storage_path)
            else:
                storage = MemoryStorage()
        self._persistence = PersistenceAdapter(
            storage,
            key=self._config.storage_key,
            share_param=self._config.share_param,
            clipboard=clipboard,
        )
        self._store = ViewStateStore(label_order=self._config.label_order)
        self._page_url = self._config.page_url

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CarrierViewer:
        if self._fetcher is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._fetcher = TextResourceTransport(self._http_session, timeout=self._config.fetch_timeout)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._fetcher = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> ViewerConfig:
        return self._config

    @property
    def store(self) -> ViewStateStore:
        return self._store

    @property
    def persistence(self) -> PersistenceAdapter:
        return self._persistence

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self, page_url: str | None = None) -> StartupResult:
        """Populate the view state for a new session.

        *page_url* is the address the page was opened with; a share-link
        parameter in it short-circuits the CSV load.
        """
        if self._fetcher is None:
            raise CarrierViewError("CarrierViewer must be used as an async context manager")
        if page_url is not None:
            self._page_url = page_url
        return await bootstrap(
            self._store,
            self._persistence,
            page_url=page_url,
            csv_source=self._config.csv_source,
            fetcher=self._fetcher,
            restore_saved=self._config.restore_saved_on_startup,
        )

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def edit_field(self, row_index: int, field_name: str, new_value: str) -> bool:
        return self._store.edit_field(row_index, field_name, new_value)

    def edit_out_of_service_date(self, row_index: int, day: date | None) -> bool:
        return self._store.edit_out_of_service_date(row_index, day)

    def set_settings(self, new_settings: Mapping[str, Any]) -> None:
        self._store.set_settings(new_settings)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save(self) -> None:
        await self._persistence.save(self._store.snapshot())

    async def load(self) -> bool:
        """Apply the saved snapshot.  Returns ``False`` when nothing was saved."""
        snapshot = await self._persistence.load()
        if snapshot is None:
            _logger.debug("No saved snapshot to load")
            return False
        self._store.restore(snapshot)
        return True

    async def reset(self) -> None:
        """Forget the saved snapshot; the next session starts from the CSV again."""
        await self._persistence.reset()

    async def share_link(self, page_url: str | None = None) -> str:
        """Share link for the current state, built on *page_url* (or the configured page)."""
        return await self._persistence.share_link(self._store.snapshot(), page_url or self._page_url)

    # ------------------------------------------------------------------
    # Pivot
    # ------------------------------------------------------------------

    def pivot(self, rows: Sequence[str] | None = None, cols: Sequence[str] | None = None) -> PivotTable:
        """Count cross-tabulation; axes default to the ``rows``/``cols`` view settings."""
        settings = self._store.settings
        row_fields = list(rows) if rows is not None else _pivot_axis(settings, "rows")
        col_fields = list(cols) if cols is not None else _pivot_axis(settings, "cols")
        return pivot_counts(self._store.records, row_fields, col_fields)
