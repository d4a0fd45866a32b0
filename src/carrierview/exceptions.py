"""Custom exception hierarchy for carrierview."""

from __future__ import annotations


class CarrierViewError(Exception):
    """Base exception for all carrierview errors."""


class CarrierViewConfigError(CarrierViewError):
    """Invalid or missing configuration."""


class ResourceFetchError(CarrierViewError):
    """The CSV resource could not be retrieved (network, non-200, missing file).

    Fatal to startup: the viewer has nothing to show and does not retry.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        status_code: int | None = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(message)


class SnapshotDecodeError(CarrierViewError):
    """A shared-link or stored snapshot is present but cannot be decoded.

    Covers invalid percent-encoding, invalid JSON and JSON that does not
    match the snapshot shape.  Startup treats this as recoverable and falls
    back to a fresh CSV load.
    """

    def __init__(self, message: str, *, origin: str = "") -> None:
        self.origin = origin
        super().__init__(message)


class StorageError(CarrierViewError):
    """The key-value store could not be read or written."""
