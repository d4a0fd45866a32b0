"""Data models for carrier records, chart series and snapshots."""

from carrierview.models.chart import ChartDataset, ChartSeries
from carrierview.models.record import RowRecord
from carrierview.models.snapshot import Snapshot

__all__ = [
    "ChartDataset",
    "ChartSeries",
    "RowRecord",
    "Snapshot",
]
