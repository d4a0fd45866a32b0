"""carrierview - Async view-state pipeline for carrier out-of-service data."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("carrierview")
except PackageNotFoundError:
    __version__ = "0+local"
from carrierview.aggregation import LabelOrder, aggregate, month_label, parse_record_date
from carrierview.config import ViewerConfig
from carrierview.csv_loader import load, parse_csv
from carrierview.exceptions import (
    CarrierViewConfigError,
    CarrierViewError,
    ResourceFetchError,
    SnapshotDecodeError,
    StorageError,
)
from carrierview.models import ChartDataset, ChartSeries, RowRecord, Snapshot
from carrierview.persistence import PersistenceAdapter
from carrierview.pivot import PivotTable, pivot_counts
from carrierview.startup import StartupOrigin, StartupResult, bootstrap
from carrierview.state import ViewStateStore
from carrierview.storage import FileStorage, KeyValueStorage, MemoryStorage
from carrierview.viewer import CarrierViewer

__all__ = [
    "__version__",
    "CarrierViewConfigError",
    "CarrierViewError",
    "CarrierViewer",
    "ChartDataset",
    "ChartSeries",
    "FileStorage",
    "KeyValueStorage",
    "LabelOrder",
    "MemoryStorage",
    "PersistenceAdapter",
    "PivotTable",
    "ResourceFetchError",
    "RowRecord",
    "Snapshot",
    "SnapshotDecodeError",
    "StartupOrigin",
    "StartupResult",
    "StorageError",
    "ViewStateStore",
    "ViewerConfig",
    "aggregate",
    "bootstrap",
    "load",
    "month_label",
    "parse_csv",
    "parse_record_date",
    "pivot_counts",
]
