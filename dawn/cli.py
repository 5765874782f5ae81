"""
DAWN Command Line Interface (CLI)
=================================

This file provides the interactive terminal program you run like:

    python -m dawn.cli --data "data/country_year_cleaned.csv"

It demonstrates:
- Argument parsing (argparse)
- A REPL loop (Read-Eval-Print Loop) for commands
- A `Session` that owns the filter parameters (with undo/redo) and asks the
  engine for a fresh result after every change

The CLI DOES NOT modify your dataset file. It only loads it once.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import argparse, logging, shlex
from .aggregation import parse_display_mode, resolve_metric
from .config import ALL_REGIONS, DATASETS, ENERGY_LABELS
from .engine import DAWN, export_csv, export_json
from .geo import load_geojson
from .loader import load_rows
from .models import FilterParams

HELP = """
DAWN commands (grouped)
----------------------

1) View / Inspect
   help | params | stats
   values country|region [prefix]

2) Filters (each change recomputes everything)
   filter year <y>                  (example: filter year 2023)
   filter range <y/m> <y/m>         (example: filter range 2022/08 2023/07)
   filter region "<Region>"|all     (example: filter region "Tropical")
   sort total|coal|oil|gas|lowCarbon
   display top5|top10|all
   reset | undo | redo

3) Results
   mix                              energy mix shares, ranked
   best                             best WUE / leakage per climate region
   savings                          water savings against the region's best
   project <delta>                  WUE at +delta degrees C (example: project 1.5)
   monthly <column>                 mean of a column per month
   means <column>                   mean of a column per country
   series "<Country>" [percent]     energy mix per period for one country
   sources                          single- vs multi-source countries
   volumes [water|energy]           water in Olympic pools, or energy as population
   geo <column>                     join country means to the GeoJSON (--geo)

4) Export / Report
   export csv|json "<path>" [mix|savings|volumes|energy]
   report "<out.docx>"

5) Exit
   quit
"""

@dataclass
class Session:
    """Filter state held outside the engine, with undo/redo stacks."""
    engine: DAWN
    params: FilterParams = field(default_factory=FilterParams)
    geojson: Optional[dict] = None
    command_log: List[str] = field(default_factory=list)
    _undo: List[FilterParams] = field(default_factory=list, init=False)
    _redo: List[FilterParams] = field(default_factory=list, init=False)

    def update(self, **changes) -> None:
        self._undo.append(self.params)
        self._redo.clear()
        self.params = self.params.with_changes(**changes)

    def reset(self) -> None:
        self._undo.append(self.params)
        self._redo.clear()
        self.params = FilterParams()

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.params)
        self.params = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.params)
        self.params = self._redo.pop()
        return True


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the DAWN CLI.

    1) Load dataset (and optional GeoJSON)
    2) Build indices
    3) Start an interactive REPL
    """
    ap = argparse.ArgumentParser(prog="dawn")
    ap.add_argument("--data", required=True, help="Path to a cleaned CSV/XLSX export")
    ap.add_argument("--dataset", default="country_year", choices=sorted(DATASETS), help="Which export this is (selects unit corrections)")
    ap.add_argument("--geo", help="Optional GeoJSON boundary file")
    ap.add_argument("--year", type=int, help="Initial year filter")
    ap.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    print("Loading dataset...")
    records = load_rows(args.data, DATASETS[args.dataset])
    engine = DAWN.from_records(records, dataset_path=args.data)
    session = Session(engine=engine, params=FilterParams(year=args.year))
    if args.geo:
        session.geojson = load_geojson(args.geo)

    print(f"Loaded {len(records)} records for {len(engine.idx.by_country)} countries. Type 'help' for commands.")
    while True:
        try:
            line = input("dawn> ")
            stripped = line.strip()
            if stripped:
                cmd0 = stripped.split()[0].lower()
                if cmd0 not in ("help", "params", "values", "stats", "quit"):
                    session.command_log.append(stripped)
        except EOFError:
            break
        if not line.strip():
            continue
        if line.strip().lower() in ("quit", "exit"):
            break
        try:
            handle(session, line)
        except Exception as e:
            print(f"Error: {e}")

def _parse_period(s: str, default_month: int = 1) -> Tuple[int, int]:
    """Parse "2023/08" into (2023, 8); a bare "2023" takes `default_month`."""
    y, _, m = s.partition("/")
    return int(y), int(m) if m else default_month

def handle(session: Session, line: str) -> None:
    """Handle one CLI command line.

    Filter commands change the session's parameters; result commands ask the
    engine for a fresh computation with the current parameters.
    """
    parts = shlex.split(line)
    cmd = parts[0].lower()
    engine = session.engine
    params = session.params

    if cmd == "help":
        print(HELP); return

    if cmd == "params":
        print(params.describe()); return

    if cmd == "stats":
        s = engine.statistics(params)
        print(f"{params.describe()}")
        print(f"Countries: {s['countries']} | multi-source: {s['multi_source']} | single-source: {s['single_source']}")
        return

    if cmd == "reset":
        session.reset(); print("Filters reset."); return

    if cmd == "undo":
        print("Undone." if session.undo() else "Nothing to undo."); return

    if cmd == "redo":
        print("Redone." if session.redo() else "Nothing to redo."); return

    if cmd == "values":
        field = parts[1].lower()
        prefix = parts[2] if len(parts) >= 3 else ""
        if field == "country":
            vals = sorted(engine.idx.by_country.keys())
        elif field == "region":
            vals = sorted(engine.idx.by_region.keys())
        else:
            raise ValueError("values field must be: country | region")
        if prefix:
            p = prefix.lower()
            vals = [v for v in vals if v.lower().startswith(p)]
        for v in vals[:50]:
            print(v)
        if len(vals) > 50:
            print(f"... ({len(vals)} total, showing 50)")
        return

    if cmd == "filter":
        kind = parts[1].lower()
        if kind == "year":
            session.update(year=int(parts[2]), start=None, end=None)
        elif kind == "range":
            session.update(year=None, start=_parse_period(parts[2]), end=_parse_period(parts[3], default_month=12))
        elif kind == "region":
            region = parts[2]
            session.update(region=ALL_REGIONS if region.lower() == ALL_REGIONS else region)
        else:
            raise ValueError("filter kind must be: year, range, region")
        print(f"Filters: {session.params.describe()}. Rows={len(engine.select_ids(session.params))}")
        return

    if cmd == "sort":
        metric = parts[1]
        if resolve_metric(metric, engine.keys) == "total" and metric.lower() != "total":
            print(f"Unknown metric {metric!r}, ranking by total.")
        session.update(sort_metric=metric)
        print(f"Sorting by {metric}."); return

    if cmd == "display":
        session.update(limit=parse_display_mode(parts[1]))
        print(f"Display: {parts[1].lower()}."); return

    if cmd == "mix":
        rows = engine.energy_mix(params)
        if not rows:
            print("No data for the current filters."); return
        for a in rows:
            shares = " ".join(f"{ENERGY_LABELS.get(k, k)}={a.shares[k]:.1%}" for k in engine.keys)
            print(f"{a.country} | {a.climate_region} | total={a.total:,.2f} TWh | {shares}")
        return

    if cmd == "best":
        bests = engine.group_best(params)
        if not bests:
            print("No data for the current filters."); return
        for g, b in bests.items():
            print(f"{g} | best WUE={b.best_value:.2f} L/kWh | best leakage={b.best_rate:.1%} | members={b.members}")
        return

    if cmd == "savings":
        rows = engine.savings(params)
        if not rows:
            print("No savings for the current filters."); return
        for s in rows:
            print(f"{s.country} | {s.group} | cooling={s.cooling_saving:.2f} leak={s.leak_saving:.2f} total={s.total:.2f} L/kWh")
        return

    if cmd == "project":
        delta = float(parts[1])
        for p in engine.projections(params, delta):
            if p.current is None:
                print(f"{p.country} | N/A")
            else:
                print(f"{p.country} | current={p.current:.2f} projected={p.projected:.2f} L/kWh ({p.pct_change:+.1f}%)")
        return

    if cmd == "monthly":
        for m in engine.monthly_means(params, parts[1]):
            print(f"{m.month:02d} | {m.value:.2f}" if m.value is not None else f"{m.month:02d} | N/D")
        return

    if cmd == "means":
        for c, v in engine.entity_means(params, parts[1]).items():
            print(f"{c} | {v:.2f}" if v is not None else f"{c} | N/D")
        return

    if cmd == "series":
        country = parts[1]
        percent = len(parts) >= 3 and parts[2].lower() == "percent"
        rows = engine.monthly_series(params, country, percent=percent)
        if not rows:
            print(f"No data for {country}."); return
        for a in rows:
            when = f"{a.year}/{a.month:02d}" if a.month else str(a.year)
            vals = " ".join(f"{ENERGY_LABELS.get(k, k)}={a.values[k]:.3f}" for k in engine.keys)
            print(f"{when} | {vals}")
        return

    if cmd == "sources":
        profiles = engine.source_profiles(params)
        multi = [p.country for p in profiles if p.is_multi_source]
        single = [p.country for p in profiles if not p.is_multi_source]
        print(f"Multi-Source Countries ({len(multi)}): {', '.join(sorted(multi))}")
        print(f"Single-Source Countries ({len(single)}): {', '.join(sorted(single))}")
        return

    if cmd == "volumes":
        kind = parts[1].lower() if len(parts) >= 2 else "water"
        if kind == "energy":
            for e in engine.energy_volumes(params):
                print(f"{e.country} | {e.energy_twh:,.1f} TWh | ~{e.population_equivalent:,} people")
        elif kind == "water":
            for w in engine.water_volumes(params):
                print(f"{w.country} | indirect={w.part_indirect:,.0f} cold={w.part_cold:,.0f} approach={w.part_approach:,.0f} total={w.total:,.0f} pools")
        else:
            raise ValueError("volumes kind must be: water, energy")
        return

    if cmd == "geo":
        if session.geojson is None:
            raise ValueError("no GeoJSON loaded (start with --geo)")
        joined = engine.geo_join(params, session.geojson, parts[1])
        matched = sum(1 for j in joined if j.has_data)
        print(f"Country matches: {matched} / {len(joined)}")
        for j in joined:
            print(f"{j.name} | {j.data:.2f}" if j.has_data else f"{j.name} | N/D")
        return

    if cmd == "report":
        from .report import generate_docx_report, ReportConfig
        path = parts[1]
        cfg = ReportConfig(command_log=session.command_log)
        generate_docx_report(engine, params, path, config=cfg)
        print(f"Report written to {path}")
        return

    if cmd == "export":
        # export <csv|json> "<path>" [mix|savings|volumes|energy]
        if len(parts) < 3:
            print('Usage: export csv "out.csv" [mix|savings|volumes|energy]')
            return
        fmt = parts[1].lower()
        out_path = parts[2]
        what = parts[3].lower() if len(parts) >= 4 else "mix"
        if what == "mix":
            rows = engine.energy_mix(params)
        elif what == "savings":
            rows = engine.savings(params)
        elif what == "volumes":
            rows = engine.water_volumes(params)
        elif what == "energy":
            rows = engine.energy_volumes(params)
        else:
            raise ValueError("export what must be: mix, savings, volumes, energy")
        if not rows:
            print("Nothing to export: current selection is empty.")
            return
        if fmt == "csv":
            export_csv(rows, out_path)
        elif fmt == "json":
            export_json(rows, out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {len(rows)} rows to {out_path}")
        return

    print("Unknown command. Type 'help'.")

if __name__ == "__main__":
    main()
