"""
Dataset loader (CSV/Excel -> CountryRecord list)
================================================

This module reads a cleaned country export and converts each row into a
`CountryRecord` object.

Key ideas:
- We try multiple possible column names because exports may vary.
- Numbers are parsed once here, tolerating comma decimal separators.
  Empty or malformed cells become None ("no data"), never NaN.
- Unit corrections come from the `DatasetSpec`, column by column.
- Rows without a country name are dropped.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging
import math
import os
import re
import pandas as pd
from .config import COUNTRY_YEAR, UNDEFINED_REGION, DatasetSpec
from .models import CountryRecord

logger = logging.getLogger(__name__)

def parse_float(x: Any) -> Optional[float]:
    """Convert a cell to float, returning None if missing/invalid.

    "12,5" -> 12.5, "" -> None, "n/a" -> None, "inf" -> None
    """
    if x is None: return None
    if isinstance(x, (int, float)):
        fv = float(x)
        return fv if math.isfinite(fv) else None
    s = str(x).strip()
    if not s: return None
    try: fv = float(s.replace(",", ".", 1))
    except ValueError: return None
    return fv if math.isfinite(fv) else None

def parse_int(x: Any) -> Optional[int]:
    """Convert a cell to int, returning None if missing/invalid."""
    fv = parse_float(x)
    return int(fv) if fv is not None else None

def _month(x: Any) -> Optional[int]:
    """Calendar month 1-12, or None for anything else."""
    m = parse_int(x)
    return m if m is not None and 1 <= m <= 12 else None

def _to_str(x: Any) -> str:
    if x is None: return ""
    if isinstance(x, float) and math.isnan(x): return ""
    return str(x).strip()

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(columns: Iterable[str], *names: str, required: bool = True) -> Optional[str]:
    cols = list(columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    if required:
        raise KeyError(f"Missing required column. Tried={names}. Available={cols}")
    return None

def records_from_rows(rows: Iterable[Mapping[str, Any]], dataset: DatasetSpec = COUNTRY_YEAR) -> List[CountryRecord]:
    """Decode string-keyed rows into typed records.

    Every column that is not an identifier becomes a measure. Columns listed
    in `dataset.scale` are divided by their factor.
    """
    rows = list(rows)
    if not rows:
        return []

    columns: List[str] = []
    for r in rows:
        for c in r.keys():
            if c not in columns:
                columns.append(c)

    country_col = _col(columns, "country", "Country", "Entity", "name_long")
    year_col = _col(columns, "year", "Year", required=False)
    month_col = _col(columns, "month", "Month", required=False)
    region_col = _col(columns, "climate_region", "Climate Region", "region", required=False)
    id_cols = {country_col, year_col, month_col, region_col}
    measure_cols = [c for c in columns if c not in id_cols]

    records: List[CountryRecord] = []
    dropped = 0
    for r in rows:
        country = _to_str(r.get(country_col))
        if not country:
            dropped += 1
            continue

        measures: Dict[str, Optional[float]] = {}
        for c in measure_cols:
            v = parse_float(r.get(c))
            if v is not None and c in dataset.scale:
                v = v / dataset.scale[c]
            measures[c] = v

        region = _to_str(r.get(region_col)) if region_col else ""
        records.append(CountryRecord(
            record_id=len(records),
            country=country,
            year=parse_int(r.get(year_col)) if year_col else None,
            month=_month(r.get(month_col)) if month_col else None,
            climate_region=region or UNDEFINED_REGION,
            measures=measures,
        ))

    if dropped:
        logger.debug("Dropped %d %s rows without a country name", dropped, dataset.name)
    return records

def read_table(path: str) -> pd.DataFrame:
    """Read a CSV or Excel export with every cell kept as text."""
    ext = os.path.splitext(path)[1].lower()
    if ext in (".xlsx", ".xls"):
        df = pd.read_excel(path, engine="openpyxl", dtype=str)
    else:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    return df

def load_rows(path: str, dataset: DatasetSpec = COUNTRY_YEAR) -> List[CountryRecord]:
    """Load one export from disk.

    This is the only step that can fail outright (missing file, bad format).
    """
    df = read_table(path)
    records = records_from_rows(df.to_dict("records"), dataset)
    logger.info("Loaded %d records from %s (%s)", len(records), path, dataset.name)
    return records
