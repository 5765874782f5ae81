import json

import pytest

from dawn.config import COAL
from dawn.engine import DAWN, export_csv, export_json
from dawn.loader import records_from_rows
from dawn.models import FilterParams

from conftest import PLAIN, energy_row, water_row


def test_select_by_year(energy_engine):
    res = energy_engine.select(FilterParams(year=2023))

    assert [r.country for r in res] == ["A", "B", "C", "E"]


def test_select_by_region(energy_engine):
    res = energy_engine.select(FilterParams(region="Arid"))

    assert [r.country for r in res] == ["B", "D"]


def test_select_all_bypasses_region(energy_engine):
    assert len(energy_engine.select(FilterParams(region="all"))) == 5


def test_select_date_range(monthly_records):
    engine = DAWN.from_records(monthly_records)

    res = engine.select(FilterParams(start=(2022, 12), end=(2023, 1)))

    assert sorted((r.country, r.year, r.month) for r in res) == [
        ("A", 2022, 12),
        ("A", 2023, 1),
        ("B", 2023, 1),
    ]


def test_select_open_ended_range(monthly_records):
    engine = DAWN.from_records(monthly_records)

    assert len(engine.select(FilterParams(start=(2023, 2)))) == 4
    assert len(engine.select(FilterParams(end=(2022, 12)))) == 1


def test_select_range_includes_yearly_rows_by_year():
    records = records_from_rows(
        [energy_row("A", y, "1", "0", "0", "0") for y in (2021, 2022, 2023, 2024, 2025)],
        PLAIN,
    )
    engine = DAWN.from_records(records)

    full = engine.select(FilterParams(start=(2022, 1), end=(2024, 12)))
    partial = engine.select(FilterParams(start=(2022, 6), end=(2024, 3)))
    single = engine.select(FilterParams(start=(2023, 6), end=(2023, 6)))

    assert [r.year for r in full] == [2022, 2023, 2024]
    assert [r.year for r in partial] == [2022, 2023, 2024]
    assert [r.year for r in single] == [2023]
    assert [r.year for r in engine.select(FilterParams(start=(2024, 1)))] == [2024, 2025]


def test_energy_mix_ranked_and_truncated(energy_engine):
    res = energy_engine.energy_mix(FilterParams(year=2023, limit=2))

    assert [a.country for a in res] == ["E", "A"]


def test_energy_mix_sorted_by_share(energy_engine):
    res = energy_engine.energy_mix(FilterParams(year=2023, sort_metric="coal", limit=None))

    assert [a.country for a in res] == ["E", "A", "C", "B"]
    assert res[0].shares[COAL] == pytest.approx(1.0)


def test_empty_region_gives_empty_results(energy_engine, water_records):
    params = FilterParams(year=2023, region="Polar")

    assert energy_engine.energy_mix(params) == []
    assert energy_engine.statistics(params) == {"countries": 0, "multi_source": 0, "single_source": 0}

    water = DAWN.from_records(water_records)
    assert water.savings(params) == []
    assert water.group_best(params) == {}
    assert water.projections(params, 2.0) == []
    assert water.water_volumes(params) == []


def test_statistics(energy_engine):
    res = energy_engine.statistics(FilterParams(year=2023))

    assert res == {"countries": 4, "multi_source": 2, "single_source": 2}


def test_same_params_same_answer(energy_engine):
    params = FilterParams(year=2023)

    assert energy_engine.energy_mix(params) == energy_engine.energy_mix(params)


def test_filter_params_are_immutable():
    params = FilterParams()
    changed = params.with_changes(region="Arid")

    assert params.region == "all"
    assert changed.region == "Arid"
    with pytest.raises(AttributeError):
        params.region = "Arid"


def test_describe():
    assert FilterParams(year=2023).describe() == "2023 | region=all | sort=total | display=top10"
    assert FilterParams(start=(2022, 8), end=(2023, 7), limit=None).describe() == (
        "2022/08 to 2023/07 | region=all | sort=total | display=all"
    )


def test_water_engine(water_records):
    engine = DAWN.from_records(water_records)
    params = FilterParams(year=2024)

    assert [s.country for s in engine.savings(params)] == ["X"]
    assert engine.group_best(params)["Tropical"].best_value == pytest.approx(80)


def test_geo_join(monthly_records):
    engine = DAWN.from_records(monthly_records)
    geojson = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"name_long": "B"}, "geometry": None},
            {"type": "Feature", "properties": {"name_long": "Atlantis"}, "geometry": None},
        ],
    }

    res = engine.geo_join(FilterParams(year=2023), geojson, "temperature")

    assert res[0].data == pytest.approx(32.5)
    assert not res[1].has_data


def test_export_json(tmp_path, energy_engine):
    path = tmp_path / "mix.json"

    export_json(energy_engine.energy_mix(FilterParams(year=2023)), str(path))

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert [p["country"] for p in payload] == ["E", "A", "C", "B"]
    assert payload[1]["Coal consumption - TWh pct"] == pytest.approx(0.4)


def test_export_csv(tmp_path, energy_engine):
    path = tmp_path / "mix.csv"

    export_csv(energy_engine.energy_mix(FilterParams(year=2023)), str(path))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("country,climate_region,year,month,total")
    assert len(lines) == 5


def test_energy_volumes_follow_filters():
    records = records_from_rows(
        [
            water_row("X", "Tropical", "", "", "", energy="8000000"),
            water_row("Y", "Arid", "", "", "", energy="16000000"),
            water_row("X", "Tropical", "", "", "", energy="99000000", year="2023"),
        ],
        PLAIN,
    )
    engine = DAWN.from_records(records)

    res = engine.energy_volumes(FilterParams(year=2024))

    assert [(e.country, e.population_equivalent) for e in res] == [("Y", 10_000_000), ("X", 5_000_000)]
    assert engine.energy_volumes(FilterParams(year=2024, region="Tropical"))[0].energy_twh == pytest.approx(8.0)
