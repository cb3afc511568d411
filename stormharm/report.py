from __future__ import annotations

"""
Storm harm report generator
---------------------------
Renders the ranked category tables as bar charts (PNG) and writes a DOCX
report containing the tables, the charts and a short description of how the
data was cleaned.

Design goals:
- Keep the analysis usable without report dependencies (lazy imports).
- Charts are plain files next to the report, so they can be reused.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging
import os

from .engine import StormAnalysis
from .models import CategoryAggregate
from .normalizer import CATEGORY_RULES, EXPONENT_MULTIPLIERS

logger = logging.getLogger(__name__)


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Source metadata printed in the report."""
    database_name: str = "NOAA Storm Database"
    institutional_author: str = "U.S. National Oceanic and Atmospheric Administration"
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Storm Event Harm Report"
    subtitle: str = "Population health and economic impact of severe weather in the United States"
    dataset_name: str = "NOAA storm event export (CSV)"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many categories to show in bar charts / tables
    top_n: int = 10

    chart_dpi: int = 150


# -----------------------------
# Charts
# -----------------------------

def _pyplot():
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install it with: python -m pip install matplotlib"
        ) from e
    return plt


def render_bar_chart(
    rows: Sequence[CategoryAggregate],
    metric: str,
    title: str,
    ylabel: str,
    path: str,
    *,
    dpi: int = 150,
) -> str:
    """Bar chart of `metric` per category, in the order given (rows are already ranked)."""
    plt = _pyplot()
    labels = [a.category for a in rows]
    values = [getattr(a, metric) for a in rows]

    plt.figure(figsize=(9, 5))
    plt.bar(labels, values)
    plt.xticks(rotation=45, ha="right")
    plt.title(title)
    plt.xlabel("Event category")
    plt.ylabel(ylabel)
    plt.tight_layout()
    plt.savefig(path, dpi=dpi)
    plt.close()
    return path


def render_cost_chart(rows: Sequence[CategoryAggregate], title: str, path: str, *, dpi: int = 150) -> str:
    """Stacked bars (property + crop) in billions of US$."""
    plt = _pyplot()
    labels = [a.category for a in rows]
    prop = [a.property_cost / 1e9 for a in rows]
    crop = [a.crop_cost / 1e9 for a in rows]

    plt.figure(figsize=(9, 5))
    plt.bar(labels, prop, label="Property")
    plt.bar(labels, crop, bottom=prop, label="Crop")
    plt.xticks(rotation=45, ha="right")
    plt.title(title)
    plt.xlabel("Event category")
    plt.ylabel("Damage (billion US$)")
    plt.legend()
    plt.tight_layout()
    plt.savefig(path, dpi=dpi)
    plt.close()
    return path


def generate_charts(
    analysis: StormAnalysis,
    out_dir: str,
    config: Optional[ReportConfig] = None,
) -> List[Tuple[str, str]]:
    """Write the three ranking charts into `out_dir`.

    Returns:
        (title, file path) pairs in report order.
    """
    config = config or ReportConfig()
    os.makedirs(out_dir, exist_ok=True)
    n = config.top_n
    charts: List[Tuple[str, str]] = []

    title = f"Top {n} event categories by fatalities"
    charts.append((title, render_bar_chart(
        analysis.health_ranking(n), "fatalities", title, "Fatalities",
        os.path.join(out_dir, "top_fatalities.png"), dpi=config.chart_dpi,
    )))

    title = f"Top {n} event categories by injuries"
    charts.append((title, render_bar_chart(
        analysis.injury_ranking(n), "injuries", title, "Injuries",
        os.path.join(out_dir, "top_injuries.png"), dpi=config.chart_dpi,
    )))

    title = f"Top {n} event categories by economic damage"
    charts.append((title, render_cost_chart(
        analysis.economic_ranking(n), title,
        os.path.join(out_dir, "top_economic_damage.png"), dpi=config.chart_dpi,
    )))

    logger.info("Wrote %d charts to %s", len(charts), out_dir)
    return charts


# -----------------------------
# Plain-text tables (CLI output)
# -----------------------------

def format_health_table(rows: Sequence[CategoryAggregate]) -> str:
    lines = [f"{'#':>3}  {'Category':<30} {'Fatalities':>11} {'Injuries':>10} {'Events':>8}"]
    for i, a in enumerate(rows, 1):
        lines.append(f"{i:>3}  {a.category[:30]:<30} {a.fatalities:>11,} {a.injuries:>10,} {a.events:>8,}")
    return "\n".join(lines)


def format_economic_table(rows: Sequence[CategoryAggregate]) -> str:
    lines = [f"{'#':>3}  {'Category':<30} {'Property (US$)':>18} {'Crop (US$)':>16} {'Total (US$)':>18}"]
    for i, a in enumerate(rows, 1):
        lines.append(
            f"{i:>3}  {a.category[:30]:<30} {a.property_cost:>18,.0f} {a.crop_cost:>16,.0f} {a.total_cost:>18,.0f}"
        )
    return "\n".join(lines)


# -----------------------------
# DOCX report
# -----------------------------

def generate_docx_report(
    analysis: StormAnalysis,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    charts_dir: Optional[str] = None,
) -> str:
    """
    Generate a DOCX report (tables + charts) for an analysis.

    Charts are written to `charts_dir`, by default a `<report name>_charts`
    folder next to the report.
    """
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    if not analysis.aggregates:
        raise ValueError("No events to report on (nothing left after cleaning).")

    out_dir = os.path.dirname(out_path) or "."
    os.makedirs(out_dir, exist_ok=True)
    if charts_dir is None:
        stem = os.path.splitext(os.path.basename(out_path))[0]
        charts_dir = os.path.join(out_dir, f"{stem}_charts")
    charts = generate_charts(analysis, charts_dir, config)

    n = config.top_n
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

    def _table(headers: List[str], rows: List[List[str]]) -> None:
        t = doc.add_table(rows=1, cols=len(headers))
        for i, h in enumerate(headers):
            t.rows[0].cells[i].text = h
        for values in rows:
            cells = t.add_row().cells
            for i, v in enumerate(values):
                cells[i].text = v

    _center_title(config.title, 20, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    cit = config.citation
    if cit.file_name:
        _kv("Data file", cit.file_name)
    _kv("Source", f"{cit.institutional_author}, {cit.database_name} ({cit.website})")
    _kv("Events analysed", f"{len(analysis.records):,}")
    _kv("Event categories", f"{len(analysis.aggregates):,}")

    # Data processing
    doc.add_heading("Data processing", level=1)
    doc.add_paragraph(
        f"Events that began before {analysis.cutoff.isoformat()} were excluded "
        f"({analysis.excluded_pre_cutoff:,} records); earlier years record only a few event types."
    )
    if analysis.dropped_rows:
        doc.add_paragraph(f"Rows dropped because of a malformed date or number: {analysis.dropped_rows:,}.")
    doc.add_paragraph(
        "Damage figures were converted to US$ using the exponent code. "
        "Codes outside the table below are treated as zero damage."
    )
    _table(
        ["Code", "Multiplier"],
        [[code, f"{int(mult):,}"] for code, mult in EXPONENT_MULTIPLIERS.items()],
    )
    doc.add_paragraph("")
    doc.add_paragraph(
        "Event types were upper-cased and the following replacements applied in order. "
        "Other near-duplicate labels are left as separate categories."
    )
    for pattern, replacement in CATEGORY_RULES:
        doc.add_paragraph(f'"{pattern}" -> "{replacement}"', style="List Bullet")

    # Health
    doc.add_heading("Population health", level=1)
    doc.add_paragraph(f"Top {n} event categories by fatalities")
    _table(
        ["Category", "Fatalities", "Injuries", "Events", "Fatalities/event"],
        [
            [a.category, f"{a.fatalities:,}", f"{a.injuries:,}", f"{a.events:,}", f"{a.fatalities_per_event():.3f}"]
            for a in analysis.health_ranking(n)
        ],
    )
    doc.add_paragraph("")
    doc.add_paragraph(f"Top {n} event categories by injuries")
    _table(
        ["Category", "Injuries", "Fatalities", "Events", "Injuries/event"],
        [
            [a.category, f"{a.injuries:,}", f"{a.fatalities:,}", f"{a.events:,}", f"{a.injuries_per_event():.3f}"]
            for a in analysis.injury_ranking(n)
        ],
    )

    # Economy
    doc.add_heading("Economic consequences", level=1)
    doc.add_paragraph(f"Top {n} event categories by total damage (property + crop)")
    _table(
        ["Category", "Property (US$)", "Crop (US$)", "Total (US$)", "Events"],
        [
            [a.category, f"{a.property_cost:,.0f}", f"{a.crop_cost:,.0f}", f"{a.total_cost:,.0f}", f"{a.events:,}"]
            for a in analysis.economic_ranking(n)
        ],
    )

    doc.add_heading("Charts", level=1)
    for title, path in charts:
        doc.add_paragraph(title)
        doc.add_picture(path, width=Inches(6.5))

    # Reproducibility footer
    doc.add_heading("Reproducibility", level=1)
    from . import __version__
    doc.add_paragraph(f"stormharm version: {__version__}")
    doc.add_paragraph(f"Cutoff date: {analysis.cutoff.isoformat()}")
    doc.add_paragraph("Ties in every ranking are broken by category name (A to Z).")

    doc.save(out_path)
    logger.info("Report written to %s", out_path)
    return out_path

