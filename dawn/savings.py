"""
Savings and projections
=======================

Comparative water-use figures:

1) Group-best: for each climate region, the lowest total WUE and the lowest
   leakage rate seen among its countries. That is the "best achievable"
   baseline for the region.
2) Savings: a country's water per kWh is split into a cooling portion
   `wue * (1 - leak)` and a leaked portion `wue * leak`. Each portion is
   compared with the same portion at the group-best figures; only positive
   differences count.
3) Projection: WUE under a temperature increase, using a linear model
   `wue * (1 + rate * delta)`.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from .config import LEAKAGES, WUE_DIRECT_APPROACH, WUE_INDIRECT, AnalysisConfig
from .aggregation import mean_of
from .dsa import merge_sort
from .indices import group_by
from .models import CountryRecord, GroupBest, SavingsBreakdown, WueProjection

@dataclass(frozen=True)
class _Entity:
    country: str
    group: str
    value: float
    rate: float

def total_wue(r: CountryRecord) -> Optional[float]:
    """Indirect + direct WUE, or None unless both are present and positive."""
    ind = r.value(WUE_INDIRECT)
    direct = r.value(WUE_DIRECT_APPROACH)
    if ind is None or direct is None or ind <= 0 or direct <= 0:
        return None
    return ind + direct

def leak_rate(r: CountryRecord, config: Optional[AnalysisConfig] = None) -> Optional[float]:
    config = config or AnalysisConfig()
    v = r.value(LEAKAGES)
    return v / config.leak_percent_divisor if v is not None else None

def group_best(entities: Iterable[Tuple[str, str, Optional[float], Optional[float]]]) -> Dict[str, GroupBest]:
    """Minimum value and minimum rate per group.

    `entities` yields (name, group, value, rate). Members missing either
    figure are ignored; groups left empty do not appear.
    """
    out: Dict[str, GroupBest] = {}
    usable = [e for e in entities if e[2] is not None and e[3] is not None]
    for group, members in group_by(usable, lambda e: e[1]).items():
        out[group] = GroupBest(
            group=group,
            best_value=min(m[2] for m in members),
            best_rate=min(m[3] for m in members),
            members=len(members),
        )
    return out

def compute_savings(value: float, rate: float, best_value: float, best_rate: float) -> Tuple[float, float]:
    """Return (cooling_saving, leak_saving), both clamped at 0.

    >>> compute_savings(100, 0.2, 80, 0.1)
    (8.0, 12.0)
    """
    cooling = value * (1 - rate) - best_value * (1 - best_rate)
    leak = value * rate - best_value * best_rate
    return max(0.0, cooling), max(0.0, leak)

def _entities(records: Iterable[CountryRecord], config: AnalysisConfig) -> List[_Entity]:
    """Per-country means of total WUE and leak rate (countries missing either dropped)."""
    out: List[_Entity] = []
    for country, rows in group_by(records, lambda r: r.country).items():
        value = mean_of(total_wue(r) for r in rows)
        rate = mean_of(leak_rate(r, config) for r in rows)
        if value is None or rate is None:
            continue
        out.append(_Entity(country=country, group=rows[0].climate_region, value=value, rate=rate))
    return out

def region_bests(records: Iterable[CountryRecord], config: Optional[AnalysisConfig] = None) -> Dict[str, GroupBest]:
    config = config or AnalysisConfig()
    return group_best((e.country, e.group, e.value, e.rate) for e in _entities(records, config))

def savings_ranking(records: Iterable[CountryRecord], config: Optional[AnalysisConfig] = None,
                    limit: Optional[int] = None) -> List[SavingsBreakdown]:
    """Savings per country against its region's best, largest first.

    Countries with nothing to save (total <= 0) are not listed.
    """
    config = config or AnalysisConfig()
    entities = _entities(records, config)
    bests = group_best((e.country, e.group, e.value, e.rate) for e in entities)

    out: List[SavingsBreakdown] = []
    for e in entities:
        best = bests[e.group]
        cooling, leak = compute_savings(e.value, e.rate, best.best_value, best.best_rate)
        if cooling + leak <= 0:
            continue
        out.append(SavingsBreakdown(
            country=e.country, group=e.group,
            current_value=e.value, current_rate=e.rate,
            best_value=best.best_value, best_rate=best.best_rate,
            cooling_saving=cooling, leak_saving=leak,
        ))
    out = merge_sort(out, key=lambda s: s.total, reverse=True)
    return out[:limit] if limit is not None else out

def project_value(base: float, delta: float, rate: float = 0.04) -> float:
    """Linear projection: `base * (1 + rate * delta)`."""
    return base * (1 + rate * delta)

def percent_change(current: Optional[float], projected: float) -> float:
    if not current:
        return 0.0
    return (projected - current) / current * 100

def projections(records: Iterable[CountryRecord], delta: float,
                config: Optional[AnalysisConfig] = None) -> List[WueProjection]:
    """Current vs projected total WUE for each country (first row per country).

    Countries without a usable WUE get a projection full of None.
    """
    config = config or AnalysisConfig()
    out: List[WueProjection] = []
    for country, rows in group_by(records, lambda r: r.country).items():
        current = total_wue(rows[0])
        if current is None:
            out.append(WueProjection(country=country, current=None, projected=None, change=None, pct_change=None))
            continue
        projected = project_value(current, delta, config.wue_impact_rate)
        out.append(WueProjection(
            country=country,
            current=current,
            projected=projected,
            change=projected - current,
            pct_change=percent_change(current, projected),
        ))
    return out
