"""
Aggregation and derived metrics
===============================

Pure functions from records to result objects. Nothing here keeps state:
callers pass the (already filtered) records and get fresh results back.

- totals and shares over a fixed category set (`aggregate_entity`)
- ranking by total or by one category's share (`rank`)
- means per month / per country for the climate and WUE maps
- per-period stacked series for one country
- source profiles (how many energy sources a country really uses)
- water volumes in Olympic-pool equivalents
- total energy with population equivalents
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence
import math
from .config import ENERGY_KEYS, METRIC_ALIASES, WUE_DIRECT_APPROACH, WUE_DIRECT_COLD, WUE_INDIRECT, TOTAL_ENERGY, AnalysisConfig
from .dsa import merge_sort
from .indices import group_by
from .models import CountryRecord, EnergyVolume, EntityAggregate, MonthlyMean, SourceProfile, WaterVolume

DISPLAY_MODES: Dict[str, Optional[int]] = {"top5": 5, "top10": 10, "all": None}

def aggregate_entity(country: str, rows: Sequence[CountryRecord], keys: Sequence[str] = ENERGY_KEYS) -> EntityAggregate:
    """Sum the category values of one entity and derive each share.

    Missing values count as 0. A zero total gives zero shares (never NaN).
    """
    values = {k: sum(r.value_or_zero(k) for r in rows) for k in keys}
    total = sum(values.values())
    safe_total = total if total > 0 else 1.0
    shares = {k: values[k] / safe_total for k in keys}
    first = rows[0] if rows else None
    years = {r.year for r in rows}
    months = {r.month for r in rows}
    return EntityAggregate(
        country=country,
        climate_region=first.climate_region if first else "",
        values=values,
        total=total,
        shares=shares,
        # only carried when every row shares it
        year=years.pop() if len(years) == 1 else None,
        month=months.pop() if len(months) == 1 else None,
    )

def aggregate_entities(records: Iterable[CountryRecord], keys: Sequence[str] = ENERGY_KEYS) -> List[EntityAggregate]:
    """One aggregate per country, in first-seen order."""
    return [aggregate_entity(c, rows, keys) for c, rows in group_by(records, lambda r: r.country).items()]

def resolve_metric(selector: Optional[str], keys: Sequence[str] = ENERGY_KEYS) -> str:
    """Map a user selector onto `"total"` or a category key.

    Accepts a full key ("Coal consumption - TWh") or a short alias ("coal",
    "lowCarbon"). Anything else falls back to "total".
    """
    if not selector:
        return "total"
    if selector in keys:
        return selector
    key = METRIC_ALIASES.get(selector.strip().lower())
    if key in keys:
        return key
    return "total"

def rank(aggregates: Iterable[EntityAggregate], metric: Optional[str] = "total", limit: Optional[int] = None,
         keys: Sequence[str] = ENERGY_KEYS) -> List[EntityAggregate]:
    """Sort descending by the selected metric and keep the first `limit`."""
    key = resolve_metric(metric, keys)
    out = merge_sort(list(aggregates), key=lambda a: a.metric(key), reverse=True)
    return out[:limit] if limit is not None else out

def parse_display_mode(mode: str) -> Optional[int]:
    m = mode.strip().lower()
    if m not in DISPLAY_MODES:
        raise ValueError("display mode must be: top5, top10, all")
    return DISPLAY_MODES[m]

def mean_of(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the finite values, or None when there are none."""
    vals = [v for v in values if v is not None and math.isfinite(v)]
    if not vals:
        return None
    return sum(vals) / len(vals)

def monthly_means(records: Iterable[CountryRecord], key: str) -> List[MonthlyMean]:
    """Average of `key` over all entities, per calendar month."""
    by_month = group_by((r for r in records if r.month is not None), lambda r: r.month)
    return [MonthlyMean(month=m, value=mean_of(r.value(key) for r in rows))
            for m, rows in sorted(by_month.items())]

def entity_means(records: Iterable[CountryRecord], key: str) -> Dict[str, Optional[float]]:
    """Average of `key` per country (None = no data)."""
    return {c: mean_of(r.value(key) for r in rows)
            for c, rows in group_by(records, lambda r: r.country).items()}

def entity_monthly_means(records: Iterable[CountryRecord], key: str) -> Dict[str, Dict[int, Optional[float]]]:
    """Average of `key` per country and month (seasonal maps)."""
    out: Dict[str, Dict[int, Optional[float]]] = {}
    for c, rows in group_by(records, lambda r: r.country).items():
        by_month = group_by((r for r in rows if r.month is not None), lambda r: r.month)
        out[c] = {m: mean_of(r.value(key) for r in mrows) for m, mrows in sorted(by_month.items())}
    return out

def monthly_series(records: Iterable[CountryRecord], country: str, keys: Sequence[str] = ENERGY_KEYS,
                   percent: bool = False) -> List[EntityAggregate]:
    """Per-period aggregates of one country, oldest first.

    With `percent=True` the values are replaced by the shares, which is what
    a 100% stacked area shows.
    """
    rows = [r for r in records if r.country == country and r.year is not None]
    out: List[EntityAggregate] = []
    for _, prows in sorted(group_by(rows, lambda r: r.period_key()).items()):
        agg = aggregate_entity(country, prows, keys)
        if percent:
            agg = EntityAggregate(country=agg.country, climate_region=agg.climate_region,
                                  values=dict(agg.shares), total=sum(agg.shares.values()),
                                  shares=dict(agg.shares), year=agg.year, month=agg.month)
        out.append(agg)
    return out

def active_source_count(agg: EntityAggregate, min_share: float = 0.05) -> int:
    """Number of categories above `min_share` of the entity's total."""
    threshold = agg.total * min_share if agg.total > 0 else 0.0
    return sum(1 for v in agg.values.values() if v > threshold)

def source_profiles(records: Iterable[CountryRecord], keys: Sequence[str] = ENERGY_KEYS,
                    min_total: float = 1.0) -> List[SourceProfile]:
    """Classify countries by how many sources exceed `min_total` summed over all rows."""
    out: List[SourceProfile] = []
    for agg in aggregate_entities(records, keys):
        active = sum(1 for v in agg.values.values() if v > min_total)
        out.append(SourceProfile(country=agg.country, climate_region=agg.climate_region,
                                 totals=dict(agg.values), active_sources=active))
    return out

def water_volumes(records: Iterable[CountryRecord], config: Optional[AnalysisConfig] = None,
                  limit: Optional[int] = 10) -> List[WaterVolume]:
    """Water used per country, in Olympic pools, split by origin.

    indirect = WUE_indirect * energy, cold = WUE_cold * energy,
    approach surplus = (WUE_approach - WUE_cold) * energy. Missing inputs
    count as 0; countries with no positive total are left out.
    """
    config = config or AnalysisConfig()
    out: List[WaterVolume] = []
    for r in records:
        kwh = r.value_or_zero(TOTAL_ENERGY) * config.energy_to_kwh
        ind = r.value_or_zero(WUE_INDIRECT)
        cold = r.value_or_zero(WUE_DIRECT_COLD)
        appr = r.value_or_zero(WUE_DIRECT_APPROACH)
        total = (ind + appr) * kwh / config.pool_volume_l
        if total <= 0:
            continue
        out.append(WaterVolume(
            country=r.country,
            part_indirect=ind * kwh / config.pool_volume_l,
            part_cold=cold * kwh / config.pool_volume_l,
            part_approach=(appr - cold) * kwh / config.pool_volume_l,
            total=total,
        ))
    out = merge_sort(out, key=lambda w: w.total, reverse=True)
    return out[:limit] if limit is not None else out

def energy_volumes(records: Iterable[CountryRecord], config: Optional[AnalysisConfig] = None,
                   limit: Optional[int] = 8) -> List[EnergyVolume]:
    """Total energy per country, largest first, with a population equivalent.

    The population is `energy / twh_per_million_people` million people,
    rounded to the nearest hundred. Countries without positive energy are
    left out.
    """
    config = config or AnalysisConfig()
    out: List[EnergyVolume] = []
    for r in records:
        twh = r.value_or_zero(TOTAL_ENERGY) / config.energy_volume_divisor
        if twh <= 0:
            continue
        people = twh / config.twh_per_million_people * 1_000_000
        out.append(EnergyVolume(
            country=r.country,
            energy_twh=twh,
            population_equivalent=int(math.floor(people / 100 + 0.5)) * 100,
        ))
    out = merge_sort(out, key=lambda e: e.energy_twh, reverse=True)
    return out[:limit] if limit is not None else out
