"""
Re-useable fixtures for tests

See https://docs.pytest.org/en/7.1.x/reference/fixtures.html#conftest-py-sharing-fixtures-across-multiple-files
"""

import pytest

from dawn.config import (
    COAL,
    GAS,
    LEAKAGES,
    LOW_CARBON,
    OIL,
    TOTAL_ENERGY,
    WUE_DIRECT_APPROACH,
    WUE_DIRECT_COLD,
    WUE_INDIRECT,
    DatasetSpec,
)
from dawn.engine import DAWN
from dawn.loader import records_from_rows

# Rows in these fixtures are already in their intended units
PLAIN = DatasetSpec(name="plain")


def energy_row(country, year, coal, oil, gas, low, region="Tropical", month=None):
    row = {
        "country": country,
        "year": str(year),
        "climate_region": region,
        COAL: coal,
        OIL: oil,
        GAS: gas,
        LOW_CARBON: low,
    }
    if month is not None:
        row["month"] = str(month)
    return row


def water_row(country, region, indirect, direct, leak, cold="", energy="", year="2024"):
    return {
        "country": country,
        "year": year,
        "climate_region": region,
        WUE_INDIRECT: indirect,
        WUE_DIRECT_APPROACH: direct,
        WUE_DIRECT_COLD: cold,
        LEAKAGES: leak,
        TOTAL_ENERGY: energy,
    }


@pytest.fixture
def energy_rows():
    return [
        energy_row("A", 2023, "40", "30", "20", "10"),
        energy_row("B", 2023, "0", "0", "0", "", region="Arid"),
        energy_row("C", 2023, "5,5", "4.5", "0", "90"),
        energy_row("D", 2022, "10", "0", "0", "0", region="Arid"),
        energy_row("", 2023, "1", "1", "1", "1"),
        energy_row("E", 2023, "200", "", "", "", region=""),
    ]


@pytest.fixture
def energy_records(energy_rows):
    return records_from_rows(energy_rows, PLAIN)


@pytest.fixture
def energy_engine(energy_records):
    return DAWN.from_records(energy_records)


@pytest.fixture
def water_records():
    return records_from_rows(
        [
            water_row("X", "Tropical", "60", "40", "20"),
            water_row("Y", "Tropical", "50", "30", "10"),
            water_row("Z", "Arid", "2", "1", "5"),
            water_row("W", "Tropical", "", "10", "15"),
        ],
        PLAIN,
    )


@pytest.fixture
def monthly_records():
    rows = []
    for month, (a_temp, b_temp) in enumerate([("20", "30"), ("22", ""), ("24,5", "35")], start=1):
        rows.append({"country": "A", "year": "2023", "month": str(month), "climate_region": "Tropical",
                     "temperature": a_temp, COAL: "1", OIL: "1", GAS: "0", LOW_CARBON: "2"})
        rows.append({"country": "B", "year": "2023", "month": str(month), "climate_region": "Arid",
                     "temperature": b_temp, COAL: "0", OIL: "3", GAS: "1", LOW_CARBON: "0"})
    rows.append({"country": "A", "year": "2022", "month": "12", "climate_region": "Tropical",
                 "temperature": "18", COAL: "4", OIL: "0", GAS: "0", LOW_CARBON: "0"})
    return records_from_rows(rows, PLAIN)
