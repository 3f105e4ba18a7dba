"""
wxdash Command Line Interface (CLI)
===================================

Interactive terminal dashboard, run like:

    python -m wxdash.cli --data "ag3_data_v3.csv"

It:
- loads the damage records once (rows with bad cost/date are dropped and counted),
- keeps a year / event-type filter and a scenario selection,
- prints the dashboard views (category breakdown, top installations, trend, ...).

The CLI DOES NOT modify the data file.
"""

from __future__ import annotations
import argparse, logging, shlex, sys
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG, ConfigError, load_config
from .engine import Dashboard
from .loader import IngestionError, load_weather_data
from .models import AggregateBucket, ScenarioResult
from .report import format_currency

logger = logging.getLogger(__name__)

HELP_TEXT = """
wxdash commands (grouped)
-------------------------

1) View / Inspect
   help
   stats                            totals for the current filter
   values year | values category    available filter options

2) Filtering
   filter year <YYYY|all>           (example: filter year 2023)
   filter category "<Type>|all"     (example: filter category "Winter Storm")
   reset

3) Views (current filter)
   categories                       cost by event type with % share
   installations                    top installations by cost
   trend                            cost and event count per year
   events [n]                       top individual events by cost
   markers                          installation map markers
   forecast                         5-year illustrative forecast
   budget                           5-year budget plan and ROI

4) Scenario modeling
   scenarios                        list catalog (* = selected)
   select <id> [<id> ...]           toggle scenarios
   run                              compute impact of the selection
   optimal                          select all scenarios and run

5) Export / Report
   export csv "<out.csv>"
   export json "<out.json>"
   report "<out.docx>"

6) Exit
   quit
"""

# commands that only read state are not logged
_READ_ONLY = ("help", "stats", "values", "categories", "installations", "trend", "events",
              "markers", "forecast", "budget", "scenarios", "quit", "exit")


def setup_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="wxdash", description="Weather damage analytics dashboard (terminal).")
    ap.add_argument("--data", default=None, help="Path or URL of the damage CSV (or .xlsx)")
    ap.add_argument("--config", default=None, help="JSON file overriding scenario catalog / baseline / coordinates")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point: load config and data, then start the REPL."""
    args = setup_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        cfg = load_config(args.config) if args.config else DEFAULT_CONFIG
    except ConfigError as e:
        print(f"Error: {e}")
        return 1
    data_path = args.data or cfg.data_path

    print("Loading dashboard data...")
    try:
        result = load_weather_data(data_path)
    except IngestionError as e:
        print(f"Error: {e}")
        return 1

    dash = Dashboard(events=result.events, config=cfg, dataset_path=data_path)
    dropped = f" ({result.dropped_count} rows excluded)" if result.dropped_count else ""
    print(f"Loaded {len(result.events)} events{dropped}. Type 'help' for commands.")

    while True:
        try:
            line = input("wxdash> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        if stripped.split()[0].lower() not in _READ_ONLY:
            dash.command_log.append(stripped)
        try:
            handle(dash, stripped, dropped_rows=result.dropped_count)
        except Exception as e:
            logger.debug("Command failed: %s", stripped, exc_info=True)
            print(f"Error: {e}")
    return 0


def handle(dash: Dashboard, line: str, dropped_rows: int = 0) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP_TEXT)
        return

    if cmd == "stats":
        s = dash.summary()
        print(f"Filter: year={_sel_year(dash)} | type={_sel_category(dash)}")
        print(f"Total Damage Cost: {format_currency(s.total_cost)}")
        print(f"Weather Events: {s.event_count}")
        print(f"Avg Cost Per Event: {format_currency(s.avg_cost_per_event)}")
        return

    if cmd == "values":
        field = parts[1].lower() if len(parts) >= 2 else ""
        if field == "year":
            vals = [str(y) for y in dash.years()]
        elif field in ("category", "type"):
            vals = [c.value for c in dash.categories()]
        else:
            raise ValueError("values field must be: year | category")
        for v in vals:
            print(v)
        return

    if cmd == "filter":
        if len(parts) < 3:
            raise ValueError('Usage: filter year <YYYY|all>  OR  filter category "<Type>|all"')
        kind, value = parts[1].lower(), parts[2]
        if kind == "year":
            dash.set_year(value)
        elif kind in ("category", "type"):
            dash.set_category(value)
        else:
            raise ValueError("filter kind must be: year, category")
        print(f"Filter: year={_sel_year(dash)} | type={_sel_category(dash)}. Size={len(dash.filtered())}")
        return

    if cmd == "reset":
        dash.reset_filters()
        print("Filters reset.")
        return

    if cmd == "categories":
        rows = dash.category_breakdown()
        if not rows:
            print("No events in current filter.")
        for b in rows:
            print(f"{b.key:<26} {format_currency(b.total_cost):>16}  {b.percentage:>3}%  ({b.event_count} events)")
        return

    if cmd == "installations":
        _print_buckets(dash.top_installations())
        return

    if cmd == "trend":
        _print_buckets(dash.cost_trend())
        return

    if cmd == "events":
        n = int(parts[1]) if len(parts) >= 2 else 10
        if n < 1:
            raise ValueError("events count must be >= 1")
        for b in dash.top_events(limit=n):
            print(f"{b.key:<40} {b.category.value if b.category else '':<26} {format_currency(b.total_cost):>16}")
        return

    if cmd == "markers":
        markers = dash.installation_markers()
        if not markers:
            print("No installations with known coordinates in current filter.")
        for m in markers:
            print(f"{m.installation:<24} ({m.lat:.4f}, {m.lng:.4f})  {format_currency(m.total_cost):>16}  r={m.radius:.1f}")
        return

    if cmd == "forecast":
        for p in dash.forecast():
            print(f"{p.year}  predicted={format_currency(p.predicted)}  "
                  f"range={format_currency(p.lower_bound)}..{format_currency(p.upper_bound)}")
        return

    if cmd == "budget":
        from .scenarios import budget_roi
        plan = dash.budget_plan()
        for b in plan:
            print(f"{b.year}  investment={format_currency(b.investment)}  savings={format_currency(b.savings)}")
        roi = budget_roi(plan)
        print(f"Total investment {format_currency(roi.total_investment)} | "
              f"cumulative savings {format_currency(roi.total_savings)} | ROI {roi.roi:.1f}x")
        return

    if cmd == "scenarios":
        selected = set(dash.selection.scenario_ids)
        for s in dash.config.scenarios:
            mark = "*" if s.id in selected else " "
            print(f"[{mark}] {s.id}: {s.name} ({round(float(s.cost_reduction_fraction) * 100)}% reduction in "
                  f"{s.target_category.value} damage, cost {format_currency(s.implementation_cost)})")
        return

    if cmd == "select":
        if len(parts) < 2:
            raise ValueError("Usage: select <scenario_id> [<scenario_id> ...]")
        for sid in parts[1:]:
            on = dash.toggle_scenario(sid)
            print(f"{sid} ({dash.config.scenario(sid).name}): {'selected' if on else 'deselected'}")
        return

    if cmd == "run":
        _print_scenario(dash.run_scenarios())
        return

    if cmd == "optimal":
        _print_scenario(dash.apply_optimal())
        return

    if cmd == "export":
        # export <csv|json> "<path>"
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path = parts[1].lower(), parts[2]
        if not dash.filtered():
            print("Nothing to export: current selection is empty.")
            return
        if fmt == "csv":
            n = dash.export_csv(out_path)
        elif fmt == "json":
            n = dash.export_json(out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {n} events to {out_path}")
        return

    if cmd == "report":
        from .report import ReportConfig, generate_docx_report
        if len(parts) < 2:
            raise ValueError('Usage: report "<path.docx>"')
        cfg = ReportConfig(dropped_rows=dropped_rows, command_log=list(dash.command_log))
        generate_docx_report(dash, parts[1], config=cfg)
        print(f"Report written to {parts[1]}")
        return

    print("Unknown command. Type 'help'.")


def _sel_year(dash: Dashboard) -> str:
    return "all" if dash.selection.year is None else str(dash.selection.year)

def _sel_category(dash: Dashboard) -> str:
    return "all" if dash.selection.category is None else dash.selection.category.value

def _print_buckets(rows: List[AggregateBucket]) -> None:
    if not rows:
        print("No events in current filter.")
    for b in rows:
        print(f"{b.key:<30} {format_currency(b.total_cost):>16}  ({b.event_count} events)")

def _print_scenario(r: ScenarioResult) -> None:
    print(f"Selected: {', '.join(r.selected_ids) if r.selected_ids else 'none'}")
    print(f"Current Projection: {format_currency(r.baseline)}")
    print(f"With Mitigation:    {format_currency(r.mitigated)}")
    print(f"Estimated Savings:  {format_currency(r.savings)}")
    print(f"Implementation Cost: {format_currency(r.total_implementation_cost)}")


if __name__ == "__main__":
    sys.exit(main())
