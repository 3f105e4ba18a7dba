"""
Data model
==========

Each valid row of the damage spreadsheet becomes a `WeatherEvent`.
Records are immutable (`frozen=True`): the dataset is loaded once and every
filter, chart and scenario is computed from it without editing it.

The other types here are the *outputs* handed to the presentation layer
(REPL tables, DOCX report). They are recomputed whenever a selection
changes and never stored.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from .classify import EventCategory, classify


@dataclass(frozen=True)
class WeatherEvent:
    """One accepted damage record."""
    event_id: int
    event_description: str
    occurred_on: date
    year: int
    cost: float
    installation: str
    state: str = ""
    branch: str = ""
    named_storm: str = ""

    @property
    def category(self) -> EventCategory:
        """Derived on demand from the raw description."""
        return classify(self.event_description)

    @property
    def full_label(self) -> str:
        """Description plus named storm, e.g. "Hurricane (Ian)"."""
        if self.named_storm:
            return f"{self.event_description} ({self.named_storm})"
        return self.event_description


@dataclass(frozen=True)
class DroppedRow:
    """A source row excluded by ingestion (1-based data row number)."""
    row_number: int
    reason: str


@dataclass(frozen=True)
class IngestResult:
    events: Tuple[WeatherEvent, ...]
    dropped: Tuple[DroppedRow, ...] = ()

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)


@dataclass(frozen=True)
class AggregateBucket:
    """One group of a grouped view (category, installation, year or event)."""
    key: str
    total_cost: float
    event_count: int
    # only filled for the category view
    percentage: Optional[int] = None
    # only filled for the individual-event view
    category: Optional[EventCategory] = None


@dataclass(frozen=True)
class DashboardSummary:
    total_cost: float
    event_count: int
    avg_cost_per_event: float


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of applying a set of mitigation scenarios to the baseline."""
    baseline: Decimal
    mitigated: Decimal
    savings: Decimal
    total_implementation_cost: Decimal
    selected_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InstallationMarker:
    """Map marker for one installation (geographic view)."""
    installation: str
    lat: float
    lng: float
    total_cost: float
    radius: float
