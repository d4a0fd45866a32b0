"""Carrier row record model."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from carrierview._constants import FIELD_NAMES


class RowRecord(BaseModel):
    """One data line of the carrier CSV.

    Every field is text; ``""`` means "not set".  Typed views of the
    values (dates, numbers) are derived at the point of use, see
    :mod:`carrierview.aggregation`.

    Records are mutable so the grid's inline editor can write a new
    ``out_of_service_date`` into the record it came from.
    """

    model_config = ConfigDict(
        extra="ignore",
        validate_assignment=True,
    )

    created_dt: str = ""
    """Date the carrier entry was created."""
    entity_type: str = ""
    """Entity type (e.g. ``"CARRIER"``)."""
    operating_status: str = ""
    """Operating status (e.g. ``"ACTIVE"``)."""
    legal_name: str = ""
    """Registered legal name."""
    out_of_service_date: str = ""
    """Date the carrier was placed out of service, if any."""
    usdot_number: str = ""
    """USDOT number, kept as text."""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        """Store ``None``/NaN as ``""`` and stringify scalar JSON values."""
        if value is None:
            return ""
        if isinstance(value, float) and math.isnan(value):
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def as_row(self) -> dict[str, str]:
        """Return the record as a plain ``{field: value}`` dict in header order."""
        return {name: getattr(self, name) for name in FIELD_NAMES}
