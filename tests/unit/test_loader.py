import math

import pytest

from dawn.config import COAL, COUNTRY_YEAR, LOW_CARBON, OIL, TOTAL_ENERGY, UNDEFINED_REGION
from dawn.loader import load_rows, parse_float, parse_int, records_from_rows


@pytest.mark.parametrize(
    "raw, exp",
    (
        ("12,5", 12.5),
        ("12.5", 12.5),
        (" 3 ", 3.0),
        ("0", 0.0),
        (7, 7.0),
        ("", None),
        ("   ", None),
        (None, None),
        ("n/a", None),
        ("inf", None),
        ("nan", None),
        (float("nan"), None),
    ),
)
def test_parse_float(raw, exp):
    res = parse_float(raw)
    if exp is None:
        assert res is None
    else:
        assert res == pytest.approx(exp)


def test_parse_int():
    assert parse_int("2023") == 2023
    assert parse_int("8.0") == 8
    assert parse_int("") is None


def test_zero_and_absent_are_distinct(energy_records):
    e = next(r for r in energy_records if r.country == "E")
    b = next(r for r in energy_records if r.country == "B")

    assert e.value(OIL) is None
    assert e.value_or_zero(OIL) == 0.0
    assert b.value(COAL) == 0.0
    assert b.value(LOW_CARBON) is None


def test_rows_without_country_dropped(energy_records):
    assert [r.country for r in energy_records] == ["A", "B", "C", "D", "E"]
    assert [r.record_id for r in energy_records] == [0, 1, 2, 3, 4]


def test_region_defaults_to_undefined(energy_records):
    assert energy_records[-1].climate_region == UNDEFINED_REGION


def test_comma_decimal_in_measures(energy_records):
    assert energy_records[2].value(COAL) == pytest.approx(5.5)


def test_unit_correction_only_on_declared_columns():
    res = records_from_rows(
        [{"country": "A", "year": "2023", COAL: "40000000", TOTAL_ENERGY: "12"}],
        COUNTRY_YEAR,
    )

    assert res[0].value(COAL) == pytest.approx(40.0)
    assert res[0].value(TOTAL_ENERGY) == pytest.approx(12.0)


def test_alternative_column_names():
    res = records_from_rows([{"Country": "Kenya", "Year": "2021", "Month": "3", "temperature": "25"}])

    assert res[0].country == "Kenya"
    assert res[0].year == 2021
    assert res[0].month == 3
    assert res[0].period_key() == 202103


@pytest.mark.parametrize("raw", ("0", "13", "-1", "x", ""))
def test_month_outside_calendar_is_absent(raw):
    res = records_from_rows([{"country": "A", "year": "2023", "month": raw}])

    assert res[0].month is None
    assert res[0].period_key() == 202300


def test_missing_country_column_raises():
    with pytest.raises(KeyError, match="Missing required column"):
        records_from_rows([{"year": "2023"}])


def test_empty_input():
    assert records_from_rows([]) == []


def test_load_rows_csv(tmp_path):
    path = tmp_path / "country_year_cleaned.csv"
    path.write_text(
        "country,year,climate_region,Coal consumption - TWh,Leakages (%)\n"
        "Ghana,2023,Tropical,\"2000000,5\",\n"
        ",2023,Arid,1,1\n",
        encoding="utf-8",
    )

    res = load_rows(str(path), COUNTRY_YEAR)

    assert len(res) == 1
    assert res[0].country == "Ghana"
    assert res[0].value(COAL) == pytest.approx(2.0000005)
    assert res[0].value("Leakages (%)") is None
    assert not math.isnan(res[0].value_or_zero("Leakages (%)"))


def test_load_rows_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rows(str(tmp_path / "nope.csv"))
