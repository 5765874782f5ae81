"""
Data model
==========

Each row of a cleaned export is converted into a `CountryRecord` object.
We keep it immutable (`frozen=True`) so that:
- records cannot be accidentally modified after loading, and
- every query builds fresh result objects instead of editing shared data.

Absent measurements are stored as `None` ("no data"). They collapse to 0 only
when summed into a total.

The remaining classes are the result types handed to the CLI, the exporters
and the report. Each one has `as_dict()` so callers get plain records.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, Optional, Tuple

from .config import ALL_REGIONS, UNDEFINED_REGION


@dataclass(frozen=True)
class CountryRecord:
    """Immutable record for one (country, year[, month]) row."""
    record_id: int
    country: str
    year: Optional[int]
    month: Optional[int] = None
    climate_region: str = UNDEFINED_REGION
    measures: Dict[str, Optional[float]] = field(default_factory=dict, compare=False)

    def value(self, key: str) -> Optional[float]:
        return self.measures.get(key)

    def value_or_zero(self, key: str) -> float:
        v = self.measures.get(key)
        return v if v is not None else 0.0

    def period_key(self) -> Optional[int]:
        """Return an integer YYYYMM key (month 0 for yearly rows)."""
        if self.year is None:
            return None
        return self.year * 100 + (self.month or 0)


@dataclass(frozen=True)
class FilterParams:
    """Everything a query depends on, passed explicitly on each call.

    `year` selects one year exactly. Otherwise `start`/`end` give an inclusive
    (year, month) range; either side may be left open.
    """
    year: Optional[int] = None
    start: Optional[Tuple[int, int]] = None
    end: Optional[Tuple[int, int]] = None
    region: str = ALL_REGIONS
    sort_metric: str = "total"
    limit: Optional[int] = 10

    def with_changes(self, **changes: Any) -> "FilterParams":
        return replace(self, **changes)

    def describe(self) -> str:
        if self.year is not None:
            when = str(self.year)
        elif self.start or self.end:
            lo = "%d/%02d" % self.start if self.start else "..."
            hi = "%d/%02d" % self.end if self.end else "..."
            when = f"{lo} to {hi}"
        else:
            when = "all periods"
        limit = f"top{self.limit}" if self.limit else "all"
        return f"{when} | region={self.region} | sort={self.sort_metric} | display={limit}"


@dataclass(frozen=True)
class EntityAggregate:
    """Category values, total and shares for one entity."""
    country: str
    climate_region: str
    values: Dict[str, float]
    total: float
    shares: Dict[str, float]
    year: Optional[int] = None
    month: Optional[int] = None

    def metric(self, key: str) -> float:
        """`"total"` or a category key; unknown keys fall back to total."""
        if key in self.shares:
            return self.shares[key]
        return self.total

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "country": self.country,
            "climate_region": self.climate_region,
            "year": self.year,
            "month": self.month,
            "total": self.total,
        }
        for k, v in self.values.items():
            out[k] = v
            out[f"{k} pct"] = self.shares[k]
        return out


@dataclass(frozen=True)
class GroupBest:
    """Most favourable (lowest) value and rate observed inside one group."""
    group: str
    best_value: float
    best_rate: float
    members: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SavingsBreakdown:
    """Water that could be saved if an entity matched its group's best."""
    country: str
    group: str
    current_value: float
    current_rate: float
    best_value: float
    best_rate: float
    cooling_saving: float
    leak_saving: float

    @property
    def total(self) -> float:
        return self.cooling_saving + self.leak_saving

    def as_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["total"] = self.total
        return out


@dataclass(frozen=True)
class WueProjection:
    country: str
    current: Optional[float]
    projected: Optional[float]
    change: Optional[float]
    pct_change: Optional[float]

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyMean:
    month: int
    value: Optional[float]

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SourceProfile:
    """How many energy sources a country really draws on."""
    country: str
    climate_region: str
    totals: Dict[str, float]
    active_sources: int

    @property
    def is_multi_source(self) -> bool:
        return self.active_sources >= 2

    def as_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["is_multi_source"] = self.is_multi_source
        return out


@dataclass(frozen=True)
class WaterVolume:
    """Yearly water volume of a country in Olympic-pool equivalents."""
    country: str
    part_indirect: float
    part_cold: float
    part_approach: float
    total: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class JoinedFeature:
    """A geographic feature with its matched data (None when unmatched)."""
    name: str
    properties: Dict[str, Any]
    data: Any = None

    @property
    def has_data(self) -> bool:
        return self.data is not None

    def as_dict(self) -> Dict[str, Any]:
        data = self.data.as_dict() if hasattr(self.data, "as_dict") else self.data
        return {"name": self.name, "data": data}


@dataclass(frozen=True)
class EnergyVolume:
    """Total energy of a country and the population that would consume it."""
    country: str
    energy_twh: float
    population_equivalent: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
