from __future__ import annotations

"""
DAWN report generator
--------------------
This module generates a DOCX report for one set of filter parameters.

Design goals:
- Keep DAWN usable even if report dependencies are missing (lazy imports).
- Report exactly what the CLI shows for the same parameters: the ranked
  energy mix, the savings ranking and the region baselines.
- Record the parameters and the command log so the numbers can be reproduced.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import os
import tempfile

from .config import ENERGY_LABELS
from .models import FilterParams


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "DAWN Analytical Report"
    subtitle: str = "Data-centre Aggregation of Water & eNergy"
    dataset_name: str = "Cleaned country export"
    # Optional: list of CLI commands used to reach the current parameters
    command_log: Optional[List[str]] = None


def generate_docx_report(
    engine,
    params: FilterParams,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report + charts for the given parameters.

    Raises ValueError when the parameters select no rows.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when "report" is used.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not engine.select_ids(params):
        raise ValueError("No records to report on (selection is empty).")

    mix = engine.energy_mix(params)
    savings = engine.savings(params)
    bests = engine.group_best(params)
    keys = list(engine.keys)

    # -----------------------------
    # 1) Charts
    # -----------------------------
    tmpdir = tempfile.mkdtemp(prefix="dawn_report_")
    chart_paths: List[Tuple[str, str]] = []

    def _save(filename: str) -> str:
        path = os.path.join(tmpdir, filename)
        plt.tight_layout()
        plt.savefig(path, dpi=200)
        plt.close()
        return path

    def _stacked(title: str, labels: List[str], layers: List[Tuple[str, List[float]]], ylabel: str, filename: str) -> None:
        plt.figure()
        bottom = np.zeros(len(labels))
        for name, vals in layers:
            arr = np.array(vals, dtype=float)
            plt.bar(labels, arr, bottom=bottom, label=name)
            bottom += arr
        plt.xticks(rotation=45, ha="right")
        plt.title(title)
        plt.ylabel(ylabel)
        plt.legend()
        chart_paths.append((title, _save(filename)))

    if mix:
        _stacked(
            "Energy mix (share of total)",
            [a.country for a in mix],
            [(ENERGY_LABELS.get(k, k), [a.shares[k] for a in mix]) for k in keys],
            "Share",
            "energy_mix.png",
        )
    if savings:
        _stacked(
            "Potential water savings against region best",
            [s.country for s in savings],
            [("Cooling", [s.cooling_saving for s in savings]), ("Leakage", [s.leak_saving for s in savings])],
            "L/kWh",
            "savings.png",
        )

    # -----------------------------
    # 2) Build DOCX report
    # -----------------------------
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(header: List[str], rows: List[List[str]]) -> None:
        t = doc.add_table(rows=1, cols=len(header))
        for i, h in enumerate(header):
            t.rows[0].cells[i].text = h
        for row in rows:
            cells = t.add_row().cells
            for i, v in enumerate(row):
                cells[i].text = v

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    if engine.dataset_path:
        _kv("Data file", os.path.basename(engine.dataset_path))
    _kv("Parameters", params.describe())
    _kv("Records in scope", str(len(engine.select_ids(params))))

    doc.add_heading("Energy mix", level=1)
    if mix:
        _table(
            ["Country", "Region", "Total (TWh)"] + [ENERGY_LABELS.get(k, k) for k in keys],
            [[a.country, a.climate_region, f"{a.total:,.2f}"] + [f"{a.shares[k]:.1%}" for k in keys] for a in mix],
        )
    else:
        doc.add_paragraph("No energy data in scope.")

    doc.add_heading("Region baselines", level=1)
    if bests:
        _table(
            ["Climate region", "Best WUE (L/kWh)", "Best leakage", "Countries"],
            [[b.group, f"{b.best_value:.2f}", f"{b.best_rate:.1%}", str(b.members)] for b in bests.values()],
        )
    else:
        doc.add_paragraph("No WUE/leakage data in scope.")

    doc.add_heading("Potential savings", level=1)
    if savings:
        _table(
            ["Country", "Region", "Cooling", "Leakage", "Total (L/kWh)"],
            [[s.country, s.group, f"{s.cooling_saving:.2f}", f"{s.leak_saving:.2f}", f"{s.total:.2f}"] for s in savings],
        )
    else:
        doc.add_paragraph("Every country in scope already matches its region's best.")

    if chart_paths:
        doc.add_heading("Visualizations", level=1)
        for title, path in chart_paths:
            doc.add_paragraph(title)
            doc.add_picture(path, width=Inches(6.5))

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as dawn_version
    from datetime import datetime as _dt
    doc.add_paragraph(f"DAWN version: {dawn_version}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
