"""
Mitigation scenario calculator
==============================

A scenario is a catalog entry ("Wind-resistant building upgrades", 40%
reduction, $3.5M to implement). Selecting several scenarios applies their
*average* reduction to the configured baseline projection:

    mitigated = baseline * (1 - sum(fractions) / number_selected)

With nothing selected the baseline is returned unchanged and savings are zero.
Catalog fractions are validated to [0, 1] in `config.Scenario`, so the averaged
reduction never exceeds 100% and `mitigated` is never negative.

All money is `Decimal` so results are exact (24,500,000 * 0.675 == 16,537,500).
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from .config import BudgetYear, Scenario
from .models import ScenarioResult


class UnknownScenarioError(KeyError):
    """A selected scenario id is not in the catalog."""


def resolve_selection(selected_ids: Iterable[str], catalog: Sequence[Scenario]) -> List[Scenario]:
    """Map ids to catalog entries, in catalog order, each at most once."""
    wanted = set(selected_ids)
    known = {s.id for s in catalog}
    unknown = sorted(wanted - known)
    if unknown:
        raise UnknownScenarioError(f"Unknown scenario id(s): {unknown}")
    return [s for s in catalog if s.id in wanted]


def compute_scenario_impact(selected_ids: Iterable[str], catalog: Sequence[Scenario], baseline: Decimal) -> ScenarioResult:
    baseline = Decimal(baseline)
    chosen = resolve_selection(selected_ids, catalog)
    ids = tuple(s.id for s in chosen)
    if not chosen:
        return ScenarioResult(
            baseline=baseline,
            mitigated=baseline,
            savings=Decimal(0),
            total_implementation_cost=Decimal(0),
            selected_ids=ids,
        )

    total_reduction = sum((s.cost_reduction_fraction for s in chosen), Decimal(0))
    mitigated = baseline * (1 - total_reduction / len(chosen))
    return ScenarioResult(
        baseline=baseline,
        mitigated=mitigated,
        savings=baseline - mitigated,
        total_implementation_cost=sum((s.implementation_cost for s in chosen), Decimal(0)),
        selected_ids=ids,
    )


def optimal_selection(catalog: Sequence[Scenario]) -> Tuple[str, ...]:
    """Every scenario in the catalog."""
    return tuple(s.id for s in catalog)


@dataclass(frozen=True)
class BudgetSummary:
    total_investment: float
    total_savings: float
    roi: float


def budget_roi(plan: Sequence[BudgetYear]) -> BudgetSummary:
    """Cumulative savings over cumulative investment for the budget plan."""
    inv = sum(b.investment for b in plan)
    sav = sum(b.savings for b in plan)
    return BudgetSummary(total_investment=inv, total_savings=sav, roi=(sav / inv) if inv else 0.0)
