"""
Indices (precomputed lookup tables)
===================================

DAWN builds simple indices (maps from value -> list of record IDs) once at
load time so that every query can filter without rescanning all rows.

Example:
- `by_country["Kenya"]` gives a sorted list of record IDs for Kenya.
- `period_to_ids[202308]` gives IDs for all rows of August 2023.
- `year_to_ids[2023]` gives IDs for all rows of 2023 (monthly or yearly).

Sorted ID lists keep outputs deterministic and allow two-pointer intersections.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple, TypeVar
from bisect import bisect_left, bisect_right
from .models import CountryRecord

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

@dataclass
class Indices:
    """Container of precomputed indices for fast filtering."""
    by_country: Dict[str, List[int]]
    by_region: Dict[str, List[int]]
    year_to_ids: Dict[int, List[int]]
    period_to_ids: Dict[int, List[int]]
    periods_sorted: List[int]

def build_indices(records: List[CountryRecord]) -> Indices:
    """Build indices from the loaded dataset."""
    by_country: Dict[str, List[int]] = {}
    by_region: Dict[str, List[int]] = {}
    year_to_ids: Dict[int, List[int]] = {}
    period_to_ids: Dict[int, List[int]] = {}

    for r in records:
        by_country.setdefault(r.country, []).append(r.record_id)
        by_region.setdefault(r.climate_region, []).append(r.record_id)
        if r.year is not None:
            year_to_ids.setdefault(r.year, []).append(r.record_id)
            period_to_ids.setdefault(r.period_key(), []).append(r.record_id)

    for d in (by_country, by_region, year_to_ids, period_to_ids):
        for k in d:
            d[k].sort()

    return Indices(
        by_country=by_country,
        by_region=by_region,
        year_to_ids=year_to_ids,
        period_to_ids=period_to_ids,
        periods_sorted=sorted(period_to_ids.keys()),
    )

def period_range_ids(idx: Indices, start: Optional[Tuple[int, int]], end: Optional[Tuple[int, int]]) -> List[int]:
    """Return sorted record IDs whose (year, month) lies in [start, end].

    Either bound may be None (open). Yearly rows (month 0) are matched by
    year alone: they are included when start year <= year <= end year.
    """
    lo_key = start[0] * 100 + start[1] if start else None
    hi_key = end[0] * 100 + end[1] if end else None
    # start from the yearly key of the start year
    lo = bisect_left(idx.periods_sorted, start[0] * 100) if start else 0
    hi = bisect_right(idx.periods_sorted, hi_key) if hi_key is not None else len(idx.periods_sorted)
    out: List[int] = []
    for p in idx.periods_sorted[lo:hi]:
        if p % 100 and lo_key is not None and p < lo_key:
            continue
        out.extend(idx.period_to_ids.get(p, []))
    out.sort()
    return out

def group_by(items: Iterable[T], key: Callable[[T], K]) -> Dict[K, List[T]]:
    """Multi-map keyed in first-seen order; items keep their input order."""
    out: Dict[K, List[T]] = {}
    for it in items:
        out.setdefault(key(it), []).append(it)
    return out
