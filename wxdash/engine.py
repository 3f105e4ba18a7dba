"""
Dashboard engine
================

1) Load dataset -> tuple of WeatherEvent records (immutable)
2) Build indices -> filter option lists and ID lookups for the filter
3) Keep the user's *selection*: year, category, chosen scenarios
4) Recompute every view from the filtered events on demand

`filter_events` is the pure filter stage; `Dashboard` is the session state the
CLI and report read from. Nothing here writes back to the loaded events.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import csv
import json
import logging
import math

from . import aggregate
from .classify import EventCategory, parse_category
from .config import DEFAULT_CONFIG, BudgetYear, DashboardConfig, ForecastPoint
from .dsa import intersect_sorted
from .indices import Indices, build_indices
from .models import AggregateBucket, DashboardSummary, InstallationMarker, ScenarioResult, WeatherEvent
from .scenarios import compute_scenario_impact, optimal_selection, resolve_selection

logger = logging.getLogger(__name__)

ALL = "all"

YearSelector = Union[int, str, None]
CategorySelector = Union[EventCategory, str, None]


def _year_value(year: YearSelector) -> Optional[int]:
    """None means "all years"."""
    if year is None:
        return None
    if isinstance(year, str):
        s = year.strip()
        if s.lower() == ALL:
            return None
        if not s.isdigit():
            raise ValueError(f"Year must be a number or 'all', got {year!r}")
        return int(s)
    return int(year)

def _category_value(category: CategorySelector) -> Optional[EventCategory]:
    if category is None:
        return None
    if isinstance(category, EventCategory):
        return category
    if category.strip().lower() == ALL:
        return None
    return parse_category(category)


def filter_events(events: Sequence[WeatherEvent], year: YearSelector = ALL, category: CategorySelector = ALL) -> List[WeatherEvent]:
    """Events matching the year AND the derived category. Returns a new list."""
    y = _year_value(year)
    c = _category_value(category)
    out: List[WeatherEvent] = []
    for e in events:
        if y is not None and e.year != y:
            continue
        if c is not None and e.category != c:
            continue
        out.append(e)
    return out

def available_years(events: Sequence[WeatherEvent]) -> List[int]:
    return sorted({e.year for e in events})

def available_categories(events: Sequence[WeatherEvent]) -> List[EventCategory]:
    return sorted({e.category for e in events}, key=lambda c: c.value)


@dataclass
class Selection:
    """Current user choices (what the filter dropdowns and checkboxes hold)."""
    year: Optional[int] = None
    category: Optional[EventCategory] = None
    scenario_ids: List[str] = field(default_factory=list)


@dataclass
class Dashboard:
    """Session state over one loaded dataset.

    The engine stores:
    - events: all WeatherEvent records (never modified)
    - config: injected catalog data (scenarios, baseline, forecast, ...)
    - selection: year/category filter and chosen scenarios
    - scenario_result: last result of `run_scenarios()`
    """
    events: Tuple[WeatherEvent, ...]
    config: DashboardConfig = DEFAULT_CONFIG
    dataset_path: Optional[str] = None
    # Commands that changed the selection (for the report)
    command_log: List[str] = field(default_factory=list)
    selection: Selection = field(default_factory=Selection)
    idx: Indices = field(init=False)
    scenario_result: ScenarioResult = field(init=False)

    def __post_init__(self) -> None:
        self.events = tuple(self.events)
        self.idx = build_indices(self.events)
        self.scenario_result = compute_scenario_impact((), self.config.scenarios, self.config.baseline_projection)

    # ---------------- Filters ----------------
    def set_year(self, year: YearSelector) -> None:
        self.selection.year = _year_value(year)

    def set_category(self, category: CategorySelector) -> None:
        self.selection.category = _category_value(category)

    def reset_filters(self) -> None:
        self.selection.year = None
        self.selection.category = None

    def filtered(self) -> List[WeatherEvent]:
        """Events in the current selection, in load order (same result as `filter_events`)."""
        year, category = self.selection.year, self.selection.category
        if year is None and category is None:
            return list(self.events)
        ids: Optional[List[int]] = None
        if year is not None:
            ids = self.idx.year_to_ids.get(year, [])
        if category is not None:
            cat_ids = self.idx.by_category.get(category, [])
            ids = cat_ids if ids is None else intersect_sorted(ids, cat_ids)
        return [self.events[i] for i in ids]

    def years(self) -> List[int]:
        return list(self.idx.years_sorted)

    def categories(self) -> List[EventCategory]:
        return self.idx.categories_sorted()

    # ---------------- Views ----------------
    def summary(self) -> DashboardSummary:
        return aggregate.summarize(self.filtered())

    def category_breakdown(self) -> List[AggregateBucket]:
        return aggregate.by_category(self.filtered())

    def top_installations(self) -> List[AggregateBucket]:
        return aggregate.by_installation(self.filtered(), limit=self.config.top_installations)

    def cost_trend(self) -> List[AggregateBucket]:
        return aggregate.by_year(self.filtered())

    def top_events(self, limit: Optional[int] = None) -> List[AggregateBucket]:
        return aggregate.by_event(self.filtered(), limit=limit)

    def installation_markers(self) -> List[InstallationMarker]:
        """Top installations that have known coordinates, sized by cost."""
        out: List[InstallationMarker] = []
        for b in self.top_installations():
            coords = self.config.installation_coordinates.get(b.key)
            if coords is None:
                logger.debug("No coordinates for installation %r", b.key)
                continue
            radius = math.sqrt(max(b.total_cost, 0.0) / 1_000_000) * 5
            out.append(InstallationMarker(b.key, coords.lat, coords.lng, b.total_cost, radius))
        return out

    def forecast(self) -> Tuple[ForecastPoint, ...]:
        return self.config.forecast

    def budget_plan(self) -> Tuple[BudgetYear, ...]:
        return self.config.budget_plan

    # ---------------- Scenarios ----------------
    def toggle_scenario(self, scenario_id: str) -> bool:
        """Add or remove a scenario from the selection. Returns True if now selected."""
        resolve_selection([scenario_id], self.config.scenarios)
        ids = self.selection.scenario_ids
        if scenario_id in ids:
            ids.remove(scenario_id)
            return False
        ids.append(scenario_id)
        return True

    def select_scenarios(self, scenario_ids: Iterable[str]) -> None:
        ids = list(dict.fromkeys(scenario_ids))
        resolve_selection(ids, self.config.scenarios)
        self.selection.scenario_ids = ids

    def run_scenarios(self) -> ScenarioResult:
        self.scenario_result = compute_scenario_impact(
            self.selection.scenario_ids, self.config.scenarios, self.config.baseline_projection
        )
        logger.info("Scenario run %s: savings=%s", self.scenario_result.selected_ids, self.scenario_result.savings)
        return self.scenario_result

    def apply_optimal(self) -> ScenarioResult:
        self.select_scenarios(optimal_selection(self.config.scenarios))
        return self.run_scenarios()

    # ---------------- Export ----------------
    def _rows(self) -> List[dict]:
        return [
            {
                "event_id": e.event_id,
                "weather_event": e.event_description,
                "named_storm": e.named_storm,
                "category": e.category.value,
                "date": e.occurred_on.isoformat(),
                "year": e.year,
                "cost": e.cost,
                "installation": e.installation,
                "state": e.state,
                "branch": e.branch,
            }
            for e in self.filtered()
        ]

    def export_csv(self, path: str) -> int:
        rows = self._rows()
        fields = ["event_id", "weather_event", "named_storm", "category", "date", "year",
                  "cost", "installation", "state", "branch"]
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=fields)
            w.writeheader()
            w.writerows(rows)
        return len(rows)

    def export_json(self, path: str) -> int:
        """Export the current filtered events to a JSON file."""
        rows = self._rows()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)
        return len(rows)
