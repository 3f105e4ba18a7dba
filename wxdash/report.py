from __future__ import annotations

"""
wxdash report generator
-----------------------
Writes a DOCX report of the dashboard's current selection: key metrics, the
grouped views as tables, charts, the forecast, the last scenario run and the
budget plan.

Design goals:
- Keep wxdash usable without report dependencies (lazy imports).
- Report only on aggregate records computed by the engine; no re-computation here.
- Skip charts whose data is empty instead of drawing blank axes.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import os
import tempfile

from .aggregate import peak_year, top_share, trend_direction
from .engine import Dashboard
from .models import AggregateBucket
from .scenarios import budget_roi


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Weather Damage Report"
    subtitle: str = "Installation weather damage analytics"
    dataset_name: str = "Installation weather damage records"
    # How many rows to show in the individual event table
    top_events: int = 15
    # Rows dropped during ingestion (shown for auditability)
    dropped_rows: int = 0
    command_log: List[str] = field(default_factory=list)


def format_currency(value) -> str:
    """$1,234,567 (no cents)."""
    v = float(value)
    sign = "-" if v < 0 else ""
    return f"{sign}${abs(v):,.0f}"


def _scope_label(dash: Dashboard) -> str:
    year = "All Years" if dash.selection.year is None else str(dash.selection.year)
    cat = "All Types" if dash.selection.category is None else dash.selection.category.value
    return f"{year} / {cat}"


def generate_docx_report(
    dash: Dashboard,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """Generate a DOCX report + charts for the dashboard's current selection."""
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
        from matplotlib.ticker import FuncFormatter
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    events = dash.filtered()
    if not events:
        raise ValueError("No events to report on (current selection is empty).")

    scope = _scope_label(dash)
    summary = dash.summary()
    categories = dash.category_breakdown()
    installations = dash.top_installations()
    trend = dash.cost_trend()
    top_events = dash.top_events(limit=config.top_events)

    # -----------------------------
    # 1) Charts
    # -----------------------------
    tmpdir = tempfile.mkdtemp(prefix="wxdash_report_")
    chart_paths: List[Tuple[str, str]] = []

    def _save(filename: str) -> str:
        path = os.path.join(tmpdir, filename)
        plt.tight_layout()
        plt.savefig(path, dpi=200)
        plt.close()
        return path

    def _money_axis(ax, axis: str = "y") -> None:
        fmt = FuncFormatter(lambda v, _: f"${v / 1e6:.1f}M")
        (ax.yaxis if axis == "y" else ax.xaxis).set_major_formatter(fmt)

    if categories and summary.total_cost > 0:
        plt.figure()
        labels = [b.key if (b.percentage or 0) >= 2 else "" for b in categories]
        plt.pie([max(b.total_cost, 0.0) for b in categories], labels=labels, autopct=None)
        plt.title(f"Cost by Weather Event Type ({scope})")
        chart_paths.append((f"Cost by Weather Event Type ({scope})", _save("pie_categories.png")))

    if trend:
        fig, ax = plt.subplots()
        x = np.arange(len(trend))
        ax.bar(x - 0.2, [b.total_cost for b in trend], width=0.4, label="Total Cost")
        _money_axis(ax)
        ax2 = ax.twinx()
        ax2.bar(x + 0.2, [b.event_count for b in trend], width=0.4, color="C2", label="Event Count")
        ax.set_xticks(x)
        ax.set_xticklabels([b.key for b in trend])
        ax.set_title(f"Historical Damage Cost Trend ({scope})")
        ax2.set_ylabel("Events")
        chart_paths.append((f"Historical Damage Cost Trend ({scope})", _save("bar_trend.png")))

    if installations:
        fig, ax = plt.subplots()
        ordered = list(reversed(installations))
        ax.barh([b.key for b in ordered], [b.total_cost for b in ordered])
        _money_axis(ax, "x")
        ax.set_title(f"Top {len(installations)} Installations by Damage Cost")
        chart_paths.append((f"Top {len(installations)} Installations by Damage Cost", _save("barh_installations.png")))

    forecast = dash.forecast()
    if forecast:
        fig, ax = plt.subplots()
        xs = [p.year for p in forecast]
        ax.plot(xs, [p.upper_bound for p in forecast], marker="o", color="C1", label="Upper Bound")
        ax.plot(xs, [p.lower_bound for p in forecast], marker="o", color="C2", label="Lower Bound")
        ax.plot(xs, [p.predicted for p in forecast], marker="o", color="C0", label="Predicted Damage")
        ax.set_xticks(xs)
        _money_axis(ax)
        ax.legend()
        ax.set_title("Projected Damage Costs (5-Year Forecast)")
        chart_paths.append(("Projected Damage Costs (5-Year Forecast)", _save("line_forecast.png")))

    # -----------------------------
    # 2) DOCX
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

    def _table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        t = doc.add_table(rows=1, cols=len(header))
        for i, h in enumerate(header):
            t.rows[0].cells[i].text = h
        for row in rows:
            cells = t.add_row().cells
            for i, v in enumerate(row):
                cells[i].text = v

    def _bucket_rows(buckets: Sequence[AggregateBucket]) -> List[List[str]]:
        return [[b.key, format_currency(b.total_cost), str(b.event_count)] for b in buckets]

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    if dash.dataset_path:
        _kv("Data file", os.path.basename(dash.dataset_path))
    _kv("Scope", scope)
    _kv("Total Damage Cost", format_currency(summary.total_cost))
    _kv("Weather Events", str(summary.event_count))
    _kv("Avg Cost Per Event", format_currency(summary.avg_cost_per_event))
    if config.dropped_rows:
        _kv("Rows excluded at load (invalid cost or date)", str(config.dropped_rows))

    # Insights
    doc.add_heading("Key insights", level=1)
    if categories:
        text = f"{categories[0].key} account for {categories[0].percentage}% of total damage costs."
        if len(categories) > 1:
            text += f" {categories[1].key} follows with {categories[1].percentage}% of costs."
        doc.add_paragraph(text, style="List Bullet")
    if installations:
        doc.add_paragraph(
            f"{installations[0].key} leads with {format_currency(installations[0].total_cost)} in damages. "
            f"The top 3 installations account for {top_share(installations, 3, summary.total_cost)}% of total damages.",
            style="List Bullet",
        )
    peak = peak_year(trend)
    if peak is not None:
        doc.add_paragraph(
            f"Historical data shows a {trend_direction(trend)} trend in weather-related damages. "
            f"{peak.key} had the highest number of weather events ({peak.event_count} events).",
            style="List Bullet",
        )

    doc.add_heading("Cost by weather event type", level=1)
    _table(["Category", "Total Cost", "Events", "Share"],
           [[b.key, format_currency(b.total_cost), str(b.event_count), f"{b.percentage}%"] for b in categories])

    doc.add_heading("Top installations", level=1)
    _table(["Installation", "Total Cost", "Events"], _bucket_rows(installations))

    doc.add_heading("Cost trend by year", level=1)
    _table(["Year", "Total Cost", "Events"], _bucket_rows(trend))

    doc.add_heading(f"Top {len(top_events)} weather events by cost", level=1)
    _table(["Event", "Category", "Total Cost"],
           [[b.key, b.category.value if b.category else "", format_currency(b.total_cost)] for b in top_events])

    doc.add_heading("Visualizations", level=1)
    for title, path in chart_paths:
        doc.add_paragraph(title)
        doc.add_picture(path, width=Inches(6.5))

    doc.add_heading("5-year forecast (illustrative)", level=1)
    doc.add_paragraph("Fixed planning figures; not derived from the loaded records.")
    _table(["Year", "Predicted", "Lower Bound", "Upper Bound"],
           [[str(p.year), format_currency(p.predicted), format_currency(p.lower_bound), format_currency(p.upper_bound)]
            for p in forecast])

    doc.add_heading("Scenario modeling", level=1)
    res = dash.scenario_result
    names = [dash.config.scenario(sid).name for sid in res.selected_ids]
    _kv("Selected strategies", ", ".join(names) if names else "none")
    _kv("Current Projection", format_currency(res.baseline))
    _kv("With Mitigation", format_currency(res.mitigated))
    _kv("Estimated Savings", format_currency(res.savings))
    _kv("Implementation Cost", format_currency(res.total_implementation_cost))

    plan = dash.budget_plan()
    if plan:
        roi = budget_roi(plan)
        doc.add_heading("Budget planning", level=1)
        _table(["Year", "Investment", "Projected Savings"],
               [[str(b.year), format_currency(b.investment), format_currency(b.savings)] for b in plan])
        doc.add_paragraph(
            f"Cumulative savings of {format_currency(roi.total_savings)} against total investment of "
            f"{format_currency(roi.total_investment)} (ROI {roi.roi:.1f}x)."
        )

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as wxdash_version
    from datetime import datetime as _dt
    doc.add_paragraph(f"wxdash version: {wxdash_version}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
    doc.add_paragraph(f"Records in scope: {len(events)}")
    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
