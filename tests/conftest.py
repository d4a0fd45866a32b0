from __future__ import annotations

import pytest

from carrierview.models.record import RowRecord

SCENARIO_CSV = (
    "created_dt,entity_type,operating_status,legal_name,out_of_service_date,usdot_number\n"
    "2020-01-01,CARRIER,ACTIVE,Acme Inc,2021-03-15,12345\n"
    "2020-02-01,CARRIER,ACTIVE,Beta LLC,,67890"
)


def make_record(legal_name: str, out_of_service_date: str = "", **fields: str) -> RowRecord:
    values = {
        "created_dt": "2020-01-01",
        "entity_type": "CARRIER",
        "operating_status": "ACTIVE",
        "legal_name": legal_name,
        "out_of_service_date": out_of_service_date,
        "usdot_number": "1",
    }
    values.update(fields)
    return RowRecord(**values)


@pytest.fixture
def scenario_csv() -> str:
    return SCENARIO_CSV


@pytest.fixture
def records() -> list[RowRecord]:
    return [
        make_record("Acme Inc", "2021-03-15", usdot_number="12345"),
        make_record("Beta LLC", "", usdot_number="67890"),
        make_record("Gamma Co", "01/20/2020", entity_type="BROKER"),
        make_record("Delta Ltd", "03/02/2021"),
    ]
