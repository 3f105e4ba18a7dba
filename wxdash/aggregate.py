"""
Aggregation views
=================

Grouped views over a (filtered) list of events, recomputed from scratch on
every selection change:

- `by_category`      cost per derived category, with share of total (%)
- `by_installation`  top-N installations by cost
- `by_year`          cost and event count per year (chronological)
- `by_event`         cost per individual event label ("Hurricane (Ian)")

Every view is one pass into a dict keyed by group, then one finalizing pass.
Magnitude views are sorted with the stable merge sort from `dsa`, so groups tied
on cost keep the order they were first seen in the data.

An empty input never produces NaN: percentages and averages fall back to 0.
"""

from __future__ import annotations
from typing import Callable, Dict, Hashable, List, Optional, Sequence
import math

from .dsa import merge_sort
from .models import AggregateBucket, DashboardSummary, WeatherEvent

def round_half_up(x: float) -> int:
    """Round like a dashboard does (2.5 -> 3), not banker's rounding."""
    return int(math.floor(x + 0.5))

def percent_of(part: float, whole: float) -> int:
    if not whole:
        return 0
    return round_half_up(part / whole * 100)

def _group(events: Sequence[WeatherEvent], key: Callable[[WeatherEvent], Hashable]) -> Dict[Hashable, List[WeatherEvent]]:
    # dicts keep insertion order -> group discovery order
    groups: Dict[Hashable, List[WeatherEvent]] = {}
    for e in events:
        groups.setdefault(key(e), []).append(e)
    return groups

def _by_cost_desc(buckets: List[AggregateBucket]) -> List[AggregateBucket]:
    return merge_sort(buckets, key=lambda b: b.total_cost, reverse=True)

def total_cost(events: Sequence[WeatherEvent]) -> float:
    return sum((e.cost for e in events), 0.0)


def by_category(events: Sequence[WeatherEvent]) -> List[AggregateBucket]:
    """Cost per derived category, largest first, with % of the filtered total."""
    grand = total_cost(events)
    buckets = []
    for cat, items in _group(events, lambda e: e.category).items():
        value = total_cost(items)
        buckets.append(AggregateBucket(
            key=cat.value,
            total_cost=value,
            event_count=len(items),
            percentage=percent_of(value, grand),
        ))
    return _by_cost_desc(buckets)

def by_installation(events: Sequence[WeatherEvent], limit: Optional[int] = 10) -> List[AggregateBucket]:
    """Installations ranked by cost (exact name match), truncated to `limit`."""
    buckets = [
        AggregateBucket(key=name, total_cost=total_cost(items), event_count=len(items))
        for name, items in _group(events, lambda e: e.installation).items()
    ]
    ranked = _by_cost_desc(buckets)
    return ranked if limit is None else ranked[:limit]

def by_year(events: Sequence[WeatherEvent]) -> List[AggregateBucket]:
    """Cost trend: total cost and event count per year, oldest first."""
    groups = _group(events, lambda e: e.year)
    return [
        AggregateBucket(key=str(y), total_cost=total_cost(groups[y]), event_count=len(groups[y]))
        for y in sorted(groups)
    ]

def by_event(events: Sequence[WeatherEvent], limit: Optional[int] = None) -> List[AggregateBucket]:
    """Finer view keyed by description + named storm, largest first.

    The bucket's category comes from the first record of the group.
    """
    buckets = [
        AggregateBucket(
            key=label,
            total_cost=total_cost(items),
            event_count=len(items),
            category=items[0].category,
        )
        for label, items in _group(events, lambda e: e.full_label).items()
    ]
    ranked = _by_cost_desc(buckets)
    return ranked if limit is None else ranked[:limit]


# -----------------------------
# Summary figures used in insight text
# -----------------------------

def summarize(events: Sequence[WeatherEvent]) -> DashboardSummary:
    total = total_cost(events)
    n = len(events)
    return DashboardSummary(total_cost=total, event_count=n, avg_cost_per_event=(total / n) if n else 0.0)

def top_share(buckets: Sequence[AggregateBucket], n: int, grand_total: float) -> int:
    """Share (%) of `grand_total` held by the first `n` buckets."""
    return percent_of(sum(b.total_cost for b in buckets[:n]), grand_total)

def peak_year(trend: Sequence[AggregateBucket]) -> Optional[AggregateBucket]:
    """Year with the most events (earliest wins ties)."""
    best: Optional[AggregateBucket] = None
    for b in trend:
        if best is None or b.event_count > best.event_count:
            best = b
    return best

def trend_direction(trend: Sequence[AggregateBucket]) -> Optional[str]:
    if not trend:
        return None
    return "rising" if trend[-1].total_cost > trend[0].total_cost else "varying"
