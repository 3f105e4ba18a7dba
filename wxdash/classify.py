"""
Event-type classifier
=====================

Damage records describe the weather event in free text ("Hurricane Mawar",
"Winter Storm Elliott", "Torando - Bldg 2201", ...). Charts need a small,
fixed set of categories instead, so every description is mapped to one
`EventCategory` by ordered keyword rules.

Order matters: "Tropical Storm with high wind" contains both "tropical" and
"storm", and must land in Hurricane/Tropical Storm because that rule is
checked first.
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Sequence, Tuple


class EventCategory(str, Enum):
    """Canonical weather event categories (value = display label)."""
    HurricaneTropicalStorm = "Hurricane/Tropical Storm"
    WinterStorm = "Winter Storm"
    SevereStorm = "Severe Storm"
    Flooding = "Flooding"
    Tornado = "Tornado"
    Hail = "Hail"
    Fire = "Fire"
    Earthquake = "Earthquake"
    Wave = "Wave"
    Other = "Other"

    def __str__(self) -> str:
        return self.value


Rule = Tuple[EventCategory, Tuple[str, ...]]

# First matching rule wins.
CATEGORY_RULES: Tuple[Rule, ...] = (
    (EventCategory.HurricaneTropicalStorm, ("hurricane", "tropical", "cyclone", "mawar")),
    (EventCategory.WinterStorm, ("winter", "snow", "arctic", "ice")),
    (EventCategory.SevereStorm, ("storm", "wind", "nor'easter", "atmospheric river")),
    (EventCategory.Flooding, ("flood", "water", "rain")),
    (EventCategory.Tornado, ("tornado", "torando")),
    (EventCategory.Hail, ("hail",)),
    (EventCategory.Fire, ("fire",)),
    (EventCategory.Earthquake, ("earthquake",)),
    (EventCategory.Wave, ("wave",)),
)


def match_rules(text: Optional[str], rules: Sequence[Rule], default: EventCategory = EventCategory.Other) -> EventCategory:
    """Return the category of the first rule with a keyword contained in `text`."""
    if not text:
        return default
    low = str(text).lower().strip()
    if not low:
        return default
    for category, keywords in rules:
        if any(k in low for k in keywords):
            return category
    return default


def classify(description: Optional[str]) -> EventCategory:
    """Map a free-text weather event description to its category.

    Total and deterministic: empty or unknown text is `EventCategory.Other`.
    """
    return match_rules(description, CATEGORY_RULES)


def parse_category(text: str) -> EventCategory:
    """Resolve a user-typed category label or enum name.

    Accepts "Hurricane/Tropical Storm", "hurricanetropicalstorm", "winter storm", ...
    """
    key = _norm(text)
    for c in EventCategory:
        if key in (_norm(c.value), _norm(c.name)):
            return c
    raise ValueError(f"Unknown category: {text!r}. Known: {', '.join(c.value for c in EventCategory)}")


def _norm(s: str) -> str:
    return "".join(ch for ch in str(s).lower() if ch.isalnum())
