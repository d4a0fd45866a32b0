"""Viewer configuration for carrierview."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from carrierview._constants import DEFAULT_CSV_SOURCE, DEFAULT_SHARE_PARAM, DEFAULT_STORAGE_KEY
from carrierview.aggregation import LabelOrder
from carrierview.exceptions import CarrierViewConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_label_order(value: str | LabelOrder) -> LabelOrder:
    try:
        return LabelOrder(value)
    except ValueError as exc:
        choices = ", ".join(order.value for order in LabelOrder)
        raise CarrierViewConfigError(f"label_order must be one of {choices}, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ViewerConfig:
    """Viewer configuration.

    Parameters
    ----------
    csv_source : str
        Location of the carrier CSV: an ``http(s)://`` URL, a ``file://``
        URL or a local path.  Defaults to ``./data.csv``.
    page_url : str
        Address of the page the viewer is served from.  Shared links are
        built on its origin and path.
    storage_path : Path or None
        JSON file backing the persistent key-value store.  ``None`` keeps
        saved snapshots in memory for the lifetime of the viewer.
    storage_key : str
        Key the snapshot is saved under.
    share_param : str
        Query parameter carrying the encoded snapshot in shared links.
    label_order : LabelOrder
        Ordering of the chart's month labels.  ``first_seen`` keeps the
        order in which months first appear in the data.
    fetch_timeout : float or None
        Total timeout in seconds for retrieving the CSV.  ``None`` waits
        indefinitely.
    restore_saved_on_startup : bool
        When no shared link is present, start from the saved snapshot
        (if any) instead of the CSV.
    """

    csv_source: str = DEFAULT_CSV_SOURCE
    page_url: str = "http://localhost/"
    storage_path: Path | None = None
    storage_key: str = DEFAULT_STORAGE_KEY
    share_param: str = DEFAULT_SHARE_PARAM
    label_order: LabelOrder = LabelOrder.FIRST_SEEN
    fetch_timeout: float | None = None
    restore_saved_on_startup: bool = False

    def __post_init__(self) -> None:
        if not self.csv_source:
            raise CarrierViewConfigError("csv_source must be non-empty")
        if not self.storage_key:
            raise CarrierViewConfigError("storage_key must be non-empty")
        if not self.share_param:
            raise CarrierViewConfigError("share_param must be non-empty")
        if self.fetch_timeout is not None and self.fetch_timeout <= 0:
            raise CarrierViewConfigError(f"fetch_timeout must be positive, got {self.fetch_timeout}")
        # Frozen dataclass: normalise via object.__setattr__.
        object.__setattr__(self, "label_order", _parse_label_order(self.label_order))
        if self.storage_path is not None and not isinstance(self.storage_path, Path):
            object.__setattr__(self, "storage_path", Path(self.storage_path))

    @classmethod
    def from_env(cls, **overrides: Any) -> ViewerConfig:
        """Create configuration from environment variables.

        Reads optional ``CARRIERVIEW_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ViewerConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CARRIERVIEW_CSV_SOURCE": "csv_source",
            "CARRIERVIEW_PAGE_URL": "page_url",
            "CARRIERVIEW_STORAGE_KEY": "storage_key",
            "CARRIERVIEW_SHARE_PARAM": "share_param",
            "CARRIERVIEW_LABEL_ORDER": "label_order",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        storage_env = env.get("CARRIERVIEW_STORAGE_PATH")
        if storage_env and "storage_path" not in overrides:
            config_kwargs["storage_path"] = Path(storage_env).expanduser()

        timeout_env = env.get("CARRIERVIEW_FETCH_TIMEOUT")
        if timeout_env is not None and "fetch_timeout" not in overrides:
            try:
                config_kwargs["fetch_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise CarrierViewConfigError(f"CARRIERVIEW_FETCH_TIMEOUT is not a number: {timeout_env!r}") from exc

        if "restore_saved_on_startup" not in overrides:
            config_kwargs["restore_saved_on_startup"] = _env_bool(env.get("CARRIERVIEW_RESTORE_SAVED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
