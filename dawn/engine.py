"""
Core engine (DAWN)
==================

This is the heart of the project. DAWN works like a tiny offline "analytics engine":

1) Load dataset -> list of CountryRecord objects (immutable)
2) Build indices -> fast lookup tables
3) Answer each query from an explicit `FilterParams` value
4) Return fresh result objects (rankings, savings, means, projections)

The engine holds no selection of its own. Each call filters the full record
set again, so the same parameters always give the same answer and callers
(the CLI session, the report) own whatever "current state" they need.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence
import csv
import json
from .aggregation import (
    active_source_count, aggregate_entities, entity_means, entity_monthly_means,
    energy_volumes, monthly_means, monthly_series, rank, source_profiles, water_volumes,
)
from .config import ALL_REGIONS, ENERGY_KEYS, AnalysisConfig
from .dsa import intersect_sorted
from .geo import join_features
from .indices import Indices, build_indices, period_range_ids
from .models import (
    CountryRecord, EnergyVolume, EntityAggregate, FilterParams, GroupBest, JoinedFeature,
    MonthlyMean, SavingsBreakdown, SourceProfile, WaterVolume, WueProjection,
)
from .savings import projections, region_bests, savings_ranking

@dataclass
class DAWN:
    """Data-centre Aggregation of Water & eNergy.

    The engine stores:
    - records: all CountryRecord rows
    - idx: precomputed indices for fast filters
    - config: constants for the derived metrics
    """
    records: List[CountryRecord]
    idx: Indices
    dataset_path: Optional[str] = None
    keys: Sequence[str] = ENERGY_KEYS
    config: AnalysisConfig = field(default_factory=AnalysisConfig)

    @classmethod
    def from_records(cls, records: List[CountryRecord], **kwargs: Any) -> "DAWN":
        return cls(records=records, idx=build_indices(records), **kwargs)

    # ---------------- Filters ----------------
    def select_ids(self, params: FilterParams) -> List[int]:
        """Sorted IDs matching the period and region of `params`."""
        if params.year is not None:
            ids = self.idx.year_to_ids.get(params.year, [])
        elif params.start or params.end:
            ids = period_range_ids(self.idx, params.start, params.end)
        else:
            ids = list(range(len(self.records)))
        if params.region != ALL_REGIONS:
            ids = intersect_sorted(ids, self.idx.by_region.get(params.region, []))
        return ids

    def select(self, params: FilterParams) -> List[CountryRecord]:
        return [self.records[i] for i in self.select_ids(params)]

    # ---------------- Energy mix ----------------
    def energy_mix(self, params: FilterParams) -> List[EntityAggregate]:
        """Per-country totals and shares, ranked and truncated per `params`."""
        aggs = aggregate_entities(self.select(params), self.keys)
        return rank(aggs, params.sort_metric, params.limit, self.keys)

    def statistics(self, params: FilterParams) -> Dict[str, int]:
        """Country counts for the stats panel (before truncation)."""
        aggs = aggregate_entities(self.select(params), self.keys)
        multi = sum(1 for a in aggs if active_source_count(a, self.config.active_source_share) >= 2)
        return {"countries": len(aggs), "multi_source": multi, "single_source": len(aggs) - multi}

    def source_profiles(self, params: FilterParams) -> List[SourceProfile]:
        return source_profiles(self.select(params), self.keys, self.config.active_source_min_twh)

    def monthly_series(self, params: FilterParams, country: str, percent: bool = False) -> List[EntityAggregate]:
        return monthly_series(self.select(params), country, self.keys, percent)

    # ---------------- Water ----------------
    def group_best(self, params: FilterParams) -> Dict[str, GroupBest]:
        return region_bests(self.select(params), self.config)

    def savings(self, params: FilterParams) -> List[SavingsBreakdown]:
        return savings_ranking(self.select(params), self.config, params.limit)

    def projections(self, params: FilterParams, delta: float) -> List[WueProjection]:
        return projections(self.select(params), delta, self.config)

    def water_volumes(self, params: FilterParams) -> List[WaterVolume]:
        return water_volumes(self.select(params), self.config, params.limit)

    def energy_volumes(self, params: FilterParams, limit: Optional[int] = 8) -> List[EnergyVolume]:
        return energy_volumes(self.select(params), self.config, limit)

    # ---------------- Climate / seasonal ----------------
    def monthly_means(self, params: FilterParams, key: str) -> List[MonthlyMean]:
        return monthly_means(self.select(params), key)

    def entity_means(self, params: FilterParams, key: str) -> Dict[str, Optional[float]]:
        return entity_means(self.select(params), key)

    def entity_monthly_means(self, params: FilterParams, key: str) -> Dict[str, Dict[int, Optional[float]]]:
        return entity_monthly_means(self.select(params), key)

    def geo_join(self, params: FilterParams, geojson: Mapping[str, Any], key: str,
                 name_field: str = "name_long") -> List[JoinedFeature]:
        """Per-country mean of `key` attached to each feature."""
        means = {c: v for c, v in self.entity_means(params, key).items() if v is not None}
        return join_features(geojson, means, name_field)

# ---------------- Export ----------------
def _plain(rows: Sequence[Any]) -> List[Dict[str, Any]]:
    return [r.as_dict() if hasattr(r, "as_dict") else dict(r) for r in rows]

def export_csv(rows: Sequence[Any], path: str) -> None:
    """Write result objects as CSV (nested dicts are JSON-encoded)."""
    payload = _plain(rows)
    fieldnames: List[str] = []
    for p in payload:
        for k in p:
            if k not in fieldnames:
                fieldnames.append(k)
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for p in payload:
            w.writerow({k: json.dumps(v) if isinstance(v, dict) else v for k, v in p.items()})

def export_json(rows: Sequence[Any], path: str) -> None:
    """Export result objects to a JSON file.

    CSV is great for spreadsheets; JSON is great for programs and preserves field names.
    """
    with open(path, "w", encoding="utf-8") as f:
        json.dump(_plain(rows), f, ensure_ascii=False, indent=2)
