"""
Dataset configuration
=====================

Column names, category enumerations and per-dataset unit corrections.

The cleaned exports store the energy-by-source columns at 1,000,000x the
intended TWh scale. That correction is declared here, per dataset, so the
loader divides exactly those columns and nothing else.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Tuple

# Energy mix categories (closed enumeration, display order)
COAL = "Coal consumption - TWh"
OIL = "Oil consumption - TWh"
GAS = "Gas consumption - TWh"
LOW_CARBON = "Low carbon - TWh"
ENERGY_KEYS: Tuple[str, ...] = (COAL, OIL, GAS, LOW_CARBON)

ENERGY_LABELS: Dict[str, str] = {
    COAL: "Coal",
    OIL: "Oil",
    GAS: "Natural Gas",
    LOW_CARBON: "Low-Carbon Sources",
}

# Short names accepted wherever a metric selector is expected
METRIC_ALIASES: Dict[str, str] = {
    "coal": COAL,
    "oil": OIL,
    "gas": GAS,
    "lowcarbon": LOW_CARBON,
    "low_carbon": LOW_CARBON,
}

TOTAL_ENERGY = "Total energy - TWh"

# Water-use efficiency (L/kWh) and leakage (%)
WUE_INDIRECT = "WUE_Indirect(L/KWh)"
WUE_DIRECT_APPROACH = "WUE_FixedApproachDirect(L/KWh)"
WUE_DIRECT_COLD = "WUE_FixedColdWaterDirect(L/KWh)"
LEAKAGES = "Leakages (%)"

CLIMATE_METRICS: Dict[str, str] = {
    "temperature": "°C",
    "humidity": "%",
    "precipitation": "mm",
    "wind_speed": "km/h",
    "wetbulb_temperature": "°C",
}

UNDEFINED_REGION = "Undefined"
ALL_REGIONS = "all"


@dataclass(frozen=True)
class DatasetSpec:
    """Describes one tabular export and the unit fixes it needs.

    `scale` maps a column name to the divisor applied at ingestion.
    """
    name: str
    scale: Dict[str, float] = field(default_factory=dict)


_ENERGY_UNIT_FIX = {k: 1_000_000.0 for k in ENERGY_KEYS}

COUNTRY_YEAR = DatasetSpec(name="country_year", scale=dict(_ENERGY_UNIT_FIX))
COUNTRY_MONTH = DatasetSpec(name="country_month", scale=dict(_ENERGY_UNIT_FIX))
# climate summaries carry no energy columns
CLIMATE_SUMMARY = DatasetSpec(name="climate_summary")

DATASETS: Dict[str, DatasetSpec] = {
    d.name: d for d in (COUNTRY_YEAR, COUNTRY_MONTH, CLIMATE_SUMMARY)
}


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunable constants for the derived metrics."""
    # linear WUE growth per degree Celsius
    wue_impact_rate: float = 0.04
    # litres in one Olympic swimming pool
    pool_volume_l: float = 2_500_000.0
    # factor from the stored `Total energy - TWh` value to kWh for this export
    energy_to_kwh: float = 1e3
    # a source counts as "active" above this share of the country's total
    active_source_share: float = 0.05
    # ... or, for country classification, above this summed TWh
    active_source_min_twh: float = 1.0
    # `Leakages (%)` is stored as a percentage
    leak_percent_divisor: float = 100.0
    # the energy-volume ranking reads `Total energy - TWh` at 1,000,000x scale
    energy_volume_divisor: float = 1_000_000.0
    # TWh consumed per million inhabitants (population equivalents)
    twh_per_million_people: float = 1.6
