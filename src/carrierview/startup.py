"""Startup sequence: shared link first, then (optionally) the saved snapshot, then the CSV."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from carrierview import csv_loader
from carrierview._transport import ResourceFetcher
from carrierview.exceptions import CarrierViewError, SnapshotDecodeError, StorageError
from carrierview.persistence import PersistenceAdapter
from carrierview.state.store import ViewStateStore

_logger = logging.getLogger(__name__)


class StartupOrigin(StrEnum):
    SHARED_LINK = "shared_link"
    SAVED = "saved"
    CSV = "csv"


@dataclass
class StartupResult:
    """Where the initial state came from and which recoverable problems were hit."""

    origin: StartupOrigin
    record_count: int
    errors: list[CarrierViewError] = field(default_factory=list)


async def bootstrap(
    store: ViewStateStore,
    persistence: PersistenceAdapter,
    *,
    page_url: str | None,
    csv_source: str,
    fetcher: ResourceFetcher | None = None,
    restore_saved: bool = False,
) -> StartupResult:
    """Populate *store* for a new session.

    A snapshot in *page_url* wins and the CSV is never fetched.  A shared
    link that cannot be decoded is reported (logged and listed in
    ``StartupResult.errors``) and startup continues with the CSV.

    Raises
    ------
    ResourceFetchError
        The CSV had to be loaded and could not be retrieved.
    """
    errors: list[CarrierViewError] = []

    if page_url:
        try:
            shared = persistence.decode_share_link(page_url)
        except SnapshotDecodeError as exc:
            _logger.error("Ignoring shared link, loading fresh data instead: %s", exc)
            errors.append(exc)
            shared = None
        if shared is not None:
            store.restore(shared)
            _logger.info("Started from shared link with %d records", len(store))
            return StartupResult(StartupOrigin.SHARED_LINK, len(store), errors)

    if restore_saved:
        try:
            saved = await persistence.load()
        except (SnapshotDecodeError, StorageError) as exc:
            _logger.warning("Ignoring saved snapshot, loading fresh data instead: %s", exc)
            errors.append(exc)
            saved = None
        if saved is not None:
            store.restore(saved)
            _logger.info("Started from saved snapshot with %d records", len(store))
            return StartupResult(StartupOrigin.SAVED, len(store), errors)

    records = await csv_loader.load(csv_source, fetcher=fetcher)
    store.set_records(records)
    _logger.info("Loaded %d records from %s", len(store), csv_source)
    return StartupResult(StartupOrigin.CSV, len(store), errors)
