"""Bar chart series model."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from carrierview._constants import (
    CHART_BACKGROUND_COLOR,
    CHART_BORDER_COLOR,
    CHART_BORDER_WIDTH,
    CHART_DATASET_LABEL,
)


class ChartDataset(BaseModel):
    """A single bar dataset (counts plus display styling)."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    label: str = CHART_DATASET_LABEL
    data: list[int] = Field(default_factory=list)
    """Count per chart label, aligned with :attr:`ChartSeries.labels`."""
    background_color: str = CHART_BACKGROUND_COLOR
    border_color: str = CHART_BORDER_COLOR
    border_width: int = CHART_BORDER_WIDTH


class ChartSeries(BaseModel):
    """Month-bucketed out-of-service counts.

    Serialises to the bar chart payload shape
    ``{"labels": [...], "datasets": [{"label": ..., "data": [...], ...}]}``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_alignment(self) -> ChartSeries:
        for dataset in self.datasets:
            if len(dataset.data) != len(self.labels):
                raise ValueError(
                    f"dataset {dataset.label!r} has {len(dataset.data)} values for {len(self.labels)} labels"
                )
        return self

    @classmethod
    def from_counts(cls, labels: list[str], counts: list[int]) -> ChartSeries:
        return cls(labels=list(labels), datasets=[ChartDataset(data=list(counts))])

    @property
    def counts(self) -> list[int]:
        """Counts of the first dataset (empty when there is none)."""
        if not self.datasets:
            return []
        return list(self.datasets[0].data)

    def pairs(self) -> Iterator[tuple[str, int]]:
        """Yield ``(label, count)`` pairs in label order."""
        return iter(zip(self.labels, self.counts, strict=False))

    @property
    def total(self) -> int:
        return sum(self.counts)
