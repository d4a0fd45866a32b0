"""Saving, restoring and sharing view state snapshots.

Two targets carry the same JSON snapshot:

* a key-value store (durable across sessions, one fixed key), and
* a query parameter on the page address (portable share links).
"""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from urllib.parse import quote, unquote_plus, urlsplit, urlunsplit

from pydantic import ValidationError

from carrierview._constants import DEFAULT_SHARE_PARAM, DEFAULT_STORAGE_KEY, URI_COMPONENT_SAFE
from carrierview._redact import summarize_for_log
from carrierview.exceptions import SnapshotDecodeError
from carrierview.models.snapshot import Snapshot
from carrierview.storage import KeyValueStorage

_logger = logging.getLogger(__name__)

Clipboard = Callable[[str], Awaitable[None] | None]

_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_uri_component(text: str) -> str:
    """Percent-encode *text* with the same safe set as JavaScript's ``encodeURIComponent``."""
    return quote(text, safe=URI_COMPONENT_SAFE)


def decode_snapshot(text: str, *, origin: str) -> Snapshot:
    """Parse snapshot JSON, raising :class:`SnapshotDecodeError` on any failure."""
    try:
        return Snapshot.model_validate_json(text)
    except ValidationError as exc:
        raise SnapshotDecodeError(
            f"{origin} snapshot is not a valid view state: {exc.error_count()} error(s), first: {exc.errors()[0]['msg']}",
            origin=origin,
        ) from exc


def _query_value(query: str, name: str) -> str | None:
    """Raw (still percent-encoded) value of the first *name* parameter."""
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        if unquote_plus(key) == name:
            return value
    return None


class PersistenceAdapter:
    """Save/load/reset snapshots in a key-value store and build share links.

    Parameters
    ----------
    storage : KeyValueStorage
        Backing store.
    key : str
        Fixed key snapshots are saved under.
    share_param : str
        Query parameter name used in share links.
    clipboard : callable or None
        Receives each generated share link.  May be a plain function or a
        coroutine function.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        share_param: str = DEFAULT_SHARE_PARAM,
        clipboard: Clipboard | None = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._share_param = share_param
        self._clipboard = clipboard

    @property
    def key(self) -> str:
        return self._key

    @property
    def share_param(self) -> str:
        return self._share_param

    # ------------------------------------------------------------------
    # Key-value store
    # ------------------------------------------------------------------

    async def save(self, snapshot: Snapshot) -> None:
        """Store *snapshot*, overwriting any earlier save."""
        text = snapshot.to_json()
        await self._storage.set(self._key, text)
        _logger.debug("Saved snapshot with %d records under %s", len(snapshot.records), self._key)

    async def load(self) -> Snapshot | None:
        """Return the saved snapshot, or ``None`` when nothing was saved.

        Raises
        ------
        SnapshotDecodeError
            A value is stored but is not a valid snapshot.
        """
        text = await self._storage.get(self._key)
        if text is None:
            _logger.debug("No snapshot saved under %s", self._key)
            return None
        return decode_snapshot(text, origin="saved")

    async def reset(self) -> None:
        """Forget the saved snapshot."""
        await self._storage.delete(self._key)
        _logger.debug("Deleted snapshot under %s", self._key)

    # ------------------------------------------------------------------
    # Share links
    # ------------------------------------------------------------------

    def build_share_link(self, snapshot: Snapshot, page_url: str) -> str:
        """Page origin and path plus a single query parameter holding *snapshot*."""
        parts = urlsplit(page_url)
        query = f"{encode_uri_component(self._share_param)}={encode_uri_component(snapshot.to_json())}"
        return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))

    async def share_link(self, snapshot: Snapshot, page_url: str) -> str:
        """Build the share link for *snapshot* and hand it to the clipboard."""
        link = self.build_share_link(snapshot, page_url)
        _logger.debug("Share link: %s", summarize_for_log(link))
        if self._clipboard is not None:
            result = self._clipboard(link)
            if inspect.isawaitable(result):
                await result
        return link

    def decode_share_link(self, page_url: str) -> Snapshot | None:
        """Snapshot embedded in *page_url*, or ``None`` when it carries none.

        An empty parameter value counts as absent.

        Raises
        ------
        SnapshotDecodeError
            The parameter is present but its percent-encoding, JSON or
            shape is invalid.
        """
        raw = _query_value(urlsplit(page_url).query, self._share_param)
        if not raw:
            return None
        if _BAD_PERCENT_ESCAPE.search(raw):
            raise SnapshotDecodeError(
                f"Share link parameter {self._share_param!r} has invalid percent-encoding",
                origin="shared_link",
            )
        try:
            text = unquote_plus(raw, errors="strict")
        except UnicodeDecodeError as exc:
            raise SnapshotDecodeError(
                f"Share link parameter {self._share_param!r} is not UTF-8: {exc}",
                origin="shared_link",
            ) from exc
        return decode_snapshot(text, origin="shared_link")
