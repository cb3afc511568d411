"""
Data model (storm event records)
================================

Each CSV row becomes a `RawEventRecord`. The normalizer derives a
`NormalizedEventRecord` from it, and the aggregator reduces those into one
`CategoryAggregate` per canonical event category.

All three are frozen dataclasses: nothing is edited after it is created,
every later stage builds new objects from the previous one.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class RawEventRecord:
    """One storm event as read from the dataset."""
    event_type: str
    begin_date: date
    fatalities: int
    injuries: int
    prop_dmg: float
    prop_exp: str
    crop_dmg: float
    crop_exp: str


@dataclass(frozen=True)
class NormalizedEventRecord:
    """A raw record plus its canonical category and absolute damage amounts (US$)."""
    raw: RawEventRecord
    category: str
    property_cost: float
    crop_cost: float

    @property
    def fatalities(self) -> int:
        return self.raw.fatalities

    @property
    def injuries(self) -> int:
        return self.raw.injuries

    @property
    def total_cost(self) -> float:
        return self.property_cost + self.crop_cost


@dataclass(frozen=True)
class CategoryAggregate:
    """Totals for one canonical category.

    Rates are methods so they are always derived from the stored totals.
    """
    category: str
    fatalities: int
    injuries: int
    property_cost: float
    crop_cost: float
    events: int

    @property
    def total_cost(self) -> float:
        return self.property_cost + self.crop_cost

    @property
    def health_total(self) -> int:
        return self.fatalities + self.injuries

    def fatalities_per_event(self) -> float:
        return self.fatalities / self.events if self.events else 0.0

    def injuries_per_event(self) -> float:
        return self.injuries / self.events if self.events else 0.0

    def cost_per_event(self) -> float:
        return self.total_cost / self.events if self.events else 0.0
