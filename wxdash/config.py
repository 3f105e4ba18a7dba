"""
Configuration (immutable catalog data)
======================================

Everything the dashboard treats as fixed reference data lives here:

- the mitigation scenario catalog,
- the baseline projection the scenarios are applied to,
- the illustrative 5-year forecast and budget plan,
- installation coordinates for the geographic view.

None of it is computed from the loaded dataset. The baseline in particular is a
configured planning figure, not a derived total.

`DEFAULT_CONFIG` carries the stock values; `load_config()` overlays a JSON file
on top of it so catalogs can be swapped without touching code.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple
import json
import logging

from .classify import EventCategory, parse_category

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Invalid configuration value or config file."""


@dataclass(frozen=True)
class Scenario:
    """One mitigation strategy from the catalog."""
    id: str
    name: str
    cost_reduction_fraction: Decimal
    implementation_cost: Decimal
    target_category: EventCategory

    def __post_init__(self) -> None:
        f = self.cost_reduction_fraction
        if not f.is_finite() or not (Decimal(0) <= f <= Decimal(1)):
            raise ConfigError(
                f"Scenario {self.id!r}: cost_reduction_fraction must be within [0, 1], "
                f"got {self.cost_reduction_fraction}"
            )
        if not self.implementation_cost.is_finite() or self.implementation_cost < 0:
            raise ConfigError(f"Scenario {self.id!r}: implementation_cost must be >= 0")


@dataclass(frozen=True)
class ForecastPoint:
    year: int
    predicted: float
    lower_bound: float
    upper_bound: float


@dataclass(frozen=True)
class BudgetYear:
    year: int
    investment: float
    savings: float


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class DashboardConfig:
    """All reference data injected into `Dashboard`."""
    baseline_projection: Decimal = Decimal("24500000")
    scenarios: Tuple[Scenario, ...] = ()
    forecast: Tuple[ForecastPoint, ...] = ()
    budget_plan: Tuple[BudgetYear, ...] = ()
    installation_coordinates: Mapping[str, Coordinates] = field(default_factory=lambda: MappingProxyType({}))
    top_installations: int = 10
    data_path: str = "ag3_data_v3.csv"

    def __post_init__(self) -> None:
        if not self.baseline_projection.is_finite():
            raise ConfigError(f"baseline_projection must be finite, got {self.baseline_projection}")
        ids = [s.id for s in self.scenarios]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ConfigError(f"Duplicate scenario ids: {dupes}")
        if self.top_installations < 1:
            raise ConfigError("top_installations must be >= 1")

    def scenario(self, scenario_id: str) -> Optional[Scenario]:
        for s in self.scenarios:
            if s.id == scenario_id:
                return s
        return None


# -----------------------------
# Stock values
# -----------------------------

DEFAULT_SCENARIOS: Tuple[Scenario, ...] = (
    Scenario("scenario1", "Enhanced stormwater infrastructure", Decimal("0.25"), Decimal("2000000"), EventCategory.Flooding),
    Scenario("scenario2", "Wind-resistant building upgrades", Decimal("0.40"), Decimal("3500000"), EventCategory.HurricaneTropicalStorm),
    Scenario("scenario3", "Wildfire prevention measures", Decimal("0.30"), Decimal("1500000"), EventCategory.Fire),
    Scenario("scenario4", "Winter weather preparedness", Decimal("0.20"), Decimal("1000000"), EventCategory.WinterStorm),
)

# Illustrative projection, not fitted to the data.
DEFAULT_FORECAST: Tuple[ForecastPoint, ...] = (
    ForecastPoint(2025, 18_000_000, 16_000_000, 19_500_000),
    ForecastPoint(2026, 21_000_000, 18_500_000, 24_000_000),
    ForecastPoint(2027, 24_500_000, 21_500_000, 28_000_000),
    ForecastPoint(2028, 28_000_000, 24_000_000, 32_000_000),
    ForecastPoint(2029, 32_500_000, 27_500_000, 37_000_000),
)

DEFAULT_BUDGET_PLAN: Tuple[BudgetYear, ...] = (
    BudgetYear(2025, 4_500_000, 2_700_000),
    BudgetYear(2026, 4_500_000, 6_300_000),
    BudgetYear(2027, 4_500_000, 8_100_000),
    BudgetYear(2028, 4_500_000, 9_900_000),
    BudgetYear(2029, 4_500_000, 11_700_000),
)

DEFAULT_COORDINATES: Mapping[str, Coordinates] = MappingProxyType({
    "Fort Bragg": Coordinates(35.1419, -79.0061),
    "Fort Hood": Coordinates(31.1319, -97.7851),
    "Fort Campbell": Coordinates(36.6672, -87.4755),
    "Fort Stewart": Coordinates(31.8691, -81.6089),
    "Fort Benning": Coordinates(32.3538, -84.9400),
    "Fort Riley": Coordinates(39.0855, -96.7645),
    "Fort Carson": Coordinates(38.7469, -104.7828),
    "Fort Drum": Coordinates(44.0509, -75.7177),
    "Fort Lewis": Coordinates(47.0855, -122.5821),
    "Fort Polk": Coordinates(31.0445, -93.2035),
})

DEFAULT_CONFIG = DashboardConfig(
    scenarios=DEFAULT_SCENARIOS,
    forecast=DEFAULT_FORECAST,
    budget_plan=DEFAULT_BUDGET_PLAN,
    installation_coordinates=DEFAULT_COORDINATES,
)


# -----------------------------
# JSON overrides
# -----------------------------

_JSON_NAMES = {dict: "object", list: "array"}

def _decimal(x: Any, what: str) -> Decimal:
    if isinstance(x, bool):
        raise ConfigError(f"{what} must be numeric, got {x!r}")
    try:
        d = Decimal(str(x))
    except (InvalidOperation, ValueError) as e:
        raise ConfigError(f"{what} must be numeric, got {x!r}") from e
    if not d.is_finite():
        raise ConfigError(f"{what} must be a finite number, got {x!r}")
    return d


def _expect(x: Any, kind: type, what: str) -> Any:
    if not isinstance(x, kind):
        raise ConfigError(f"{what} must be a JSON {_JSON_NAMES[kind]}, got {type(x).__name__}")
    return x


def _scenario_from_dict(d: Dict[str, Any]) -> Scenario:
    _expect(d, dict, "Scenario entry")
    try:
        return Scenario(
            id=str(d["id"]),
            name=str(d["name"]),
            cost_reduction_fraction=_decimal(d["cost_reduction_fraction"], "cost_reduction_fraction"),
            implementation_cost=_decimal(d.get("implementation_cost", 0), "implementation_cost"),
            target_category=parse_category(str(d.get("target_category", "Other"))),
        )
    except KeyError as e:
        raise ConfigError(f"Scenario entry missing key {e}") from e
    except ValueError as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e)) from e


def config_from_dict(data: Dict[str, Any], base: DashboardConfig = DEFAULT_CONFIG) -> DashboardConfig:
    """Overlay known keys of `data` on `base`. Unknown keys are ignored (logged)."""
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a JSON object")
    known = {"baseline_projection", "scenarios", "installation_coordinates", "top_installations", "data_path"}
    for k in sorted(set(data) - known):
        logger.warning("Ignoring unknown config key %r", k)

    changes: Dict[str, Any] = {}
    if "baseline_projection" in data:
        changes["baseline_projection"] = _decimal(data["baseline_projection"], "baseline_projection")
    if "scenarios" in data:
        changes["scenarios"] = tuple(_scenario_from_dict(s) for s in _expect(data["scenarios"], list, "scenarios"))
    if "installation_coordinates" in data:
        coords = {}
        for name, c in _expect(data["installation_coordinates"], dict, "installation_coordinates").items():
            try:
                coords[str(name)] = Coordinates(float(c["lat"]), float(c["lng"]))
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigError(f"Bad coordinates for {name!r}: {c!r}") from e
        changes["installation_coordinates"] = MappingProxyType(coords)
    if "top_installations" in data:
        top = data["top_installations"]
        if isinstance(top, bool) or not isinstance(top, int):
            raise ConfigError(f"top_installations must be an integer, got {top!r}")
        changes["top_installations"] = top
    if "data_path" in data:
        changes["data_path"] = str(data["data_path"])
    return replace(base, **changes)


def load_config(path: str) -> DashboardConfig:
    """Read a JSON config file and overlay it on `DEFAULT_CONFIG`."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read config {path}: {e}") from e
    cfg = config_from_dict(data)
    logger.info("Loaded config from %s (%d scenarios)", path, len(cfg.scenarios))
    return cfg
