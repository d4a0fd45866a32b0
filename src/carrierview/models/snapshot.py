"""Serialized view state used for persistence and shared links."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from carrierview.models.chart import ChartSeries
from carrierview.models.record import RowRecord


class Snapshot(BaseModel):
    """The ``(records, chartSeries, settings)`` triple.

    Older snapshots written by the browser build used the keys
    ``tableData``, ``chartData`` and ``viewSettings``; both spellings are
    accepted on input, output always uses the current keys.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    records: list[RowRecord] = Field(
        validation_alias=AliasChoices("records", "tableData"),
    )
    chart_series: ChartSeries = Field(
        validation_alias=AliasChoices("chartSeries", "chart_series", "chartData"),
        serialization_alias="chartSeries",
    )
    settings: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("settings", "viewSettings"),
    )

    @field_validator("settings", mode="before")
    @classmethod
    def _none_settings(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_json(self) -> str:
        """Compact JSON text of the snapshot."""
        return self.model_dump_json(by_alias=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
