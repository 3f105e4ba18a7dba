"""
Indices (precomputed lookup tables)
===================================

Built once after loading: maps from a filter value to the positions (in
`Dashboard.events`) of the events having it.

- `year_to_ids[2023]` gives positions of all events in 2023.
- `by_category[EventCategory.Flooding]` gives positions of all flooding events.

`Dashboard.filtered()` intersects these lists instead of rescanning every
event, and the key sets are the filter option lists. Position lists are built
in load order, so they are ascending.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Sequence
from .classify import EventCategory
from .models import WeatherEvent

@dataclass
class Indices:
    """Container of precomputed indices."""
    year_to_ids: Dict[int, List[int]]
    by_category: Dict[EventCategory, List[int]]
    years_sorted: List[int]

    def categories_sorted(self) -> List[EventCategory]:
        """Categories present in the data, alphabetical by label."""
        return sorted(self.by_category, key=lambda c: c.value)

def build_indices(events: Sequence[WeatherEvent]) -> Indices:
    year_to_ids: Dict[int, List[int]] = {}
    by_category: Dict[EventCategory, List[int]] = {}

    for i, e in enumerate(events):
        year_to_ids.setdefault(e.year, []).append(i)
        by_category.setdefault(e.category, []).append(i)

    return Indices(
        year_to_ids=year_to_ids,
        by_category=by_category,
        years_sorted=sorted(year_to_ids),
    )
