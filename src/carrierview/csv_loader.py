"""CSV loading: fetch the carrier CSV and parse it into row records."""

from __future__ import annotations

import csv
import io
import logging
import sys

import aiohttp

from carrierview._constants import FIELD_NAMES
from carrierview._transport import ResourceFetcher, TextResourceTransport
from carrierview.models.record import RowRecord

_logger = logging.getLogger(__name__)

_EXTRA_CELLS_KEY = "__extra__"


def _lift_field_size_limit() -> None:
    """Allow arbitrarily long cells; the csv default of 128 KiB aborts the reader."""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            # C long is 32 bits on some platforms.
            limit //= 10


_lift_field_size_limit()


def parse_csv(text: str) -> list[RowRecord]:
    """Parse CSV text with a header line into row records.

    Parsing is permissive: short rows are padded with ``""``, surplus
    cells are dropped and blank lines are skipped.  Nothing in the data
    makes this raise.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.DictReader(io.StringIO(text, newline=""), restkey=_EXTRA_CELLS_KEY, restval="")
    header = reader.fieldnames
    if not header:
        _logger.debug("CSV has no header line; no records parsed")
        return []

    missing = [name for name in FIELD_NAMES if name not in header]
    if missing:
        _logger.warning("CSV header is missing columns %s; they will be empty", ", ".join(missing))

    records: list[RowRecord] = []
    try:
        for row in reader:
            extra = row.pop(_EXTRA_CELLS_KEY, None)
            if extra:
                _logger.debug("Line %d has %d surplus cells; ignoring them", reader.line_num, len(extra))
            values = {name: row.get(name) or "" for name in FIELD_NAMES}
            records.append(RowRecord.model_validate(values))
    except csv.Error as exc:
        _logger.warning("Stopped parsing CSV at line %d: %s", reader.line_num, exc)

    return records


async def load(
    source: str,
    *,
    fetcher: ResourceFetcher | None = None,
    timeout: float | None = None,
) -> list[RowRecord]:
    """Retrieve *source* and parse it into row records.

    Without an explicit *fetcher*, HTTP sources are fetched through a
    short-lived ``aiohttp.ClientSession`` with a total *timeout* in seconds
    (``None`` waits indefinitely).  *timeout* is ignored when a fetcher is
    given; configure the fetcher instead.

    Raises
    ------
    ResourceFetchError
        The resource could not be retrieved.
    """
    if fetcher is None:
        async with aiohttp.ClientSession() as session:
            return await load(source, fetcher=TextResourceTransport(session, timeout=timeout))

    text = await fetcher.fetch_text(source)
    records = parse_csv(text)
    _logger.debug("Parsed %d records from %s", len(records), source)
    return records
