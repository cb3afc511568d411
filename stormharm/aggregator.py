"""
Aggregator (group by canonical category)
========================================

Reduces normalized records to one `CategoryAggregate` per category and
provides the ranked "top N" views used by the report.

Notes:
- Grouping is an exact string match on `category`.
- Money is summed with `math.fsum` (correctly rounded double precision), so
  the order of records does not change the result. Very large inputs could
  switch to `decimal` accumulation if cent-level precision ever matters.
- Ranking is descending by the chosen field; ties are broken by category
  label ascending so the output order is always the same.
"""

from __future__ import annotations
import heapq
import math
from typing import Callable, Dict, Iterable, List

from .models import CategoryAggregate, NormalizedEventRecord

DEFAULT_TOP_N = 10

RANK_FIELDS = (
    "fatalities",
    "injuries",
    "health_total",
    "property_cost",
    "crop_cost",
    "total_cost",
    "events",
)


def aggregate(records: Iterable[NormalizedEventRecord]) -> List[CategoryAggregate]:
    """Group records by category and sum their harm/damage figures.

    Returns:
        One CategoryAggregate per category, sorted by category label.
    """
    groups: Dict[str, List[NormalizedEventRecord]] = {}
    for r in records:
        groups.setdefault(r.category, []).append(r)

    out: List[CategoryAggregate] = []
    for category in sorted(groups):
        rows = groups[category]
        out.append(CategoryAggregate(
            category=category,
            fatalities=sum(r.fatalities for r in rows),
            injuries=sum(r.injuries for r in rows),
            property_cost=math.fsum(r.property_cost for r in rows),
            crop_cost=math.fsum(r.crop_cost for r in rows),
            events=len(rows),
        ))
    return out


def merge_aggregates(parts: Iterable[Iterable[CategoryAggregate]]) -> List[CategoryAggregate]:
    """Merge partial aggregate tables (e.g. from independently processed chunks)."""
    merged: Dict[str, CategoryAggregate] = {}
    for part in parts:
        for a in part:
            prev = merged.get(a.category)
            if prev is None:
                merged[a.category] = a
                continue
            merged[a.category] = CategoryAggregate(
                category=a.category,
                fatalities=prev.fatalities + a.fatalities,
                injuries=prev.injuries + a.injuries,
                property_cost=prev.property_cost + a.property_cost,
                crop_cost=prev.crop_cost + a.crop_cost,
                events=prev.events + a.events,
            )
    return [merged[k] for k in sorted(merged)]


def _field_key(field: str) -> Callable[[CategoryAggregate], object]:
    f = field.lower().strip()
    if f not in RANK_FIELDS:
        raise ValueError(f"field must be one of: {', '.join(RANK_FIELDS)}")
    return lambda a: getattr(a, f)


def top_n(aggregates: Iterable[CategoryAggregate], field: str, n: int = DEFAULT_TOP_N) -> List[CategoryAggregate]:
    """Return the `n` largest aggregates by `field` (ties: category ascending)."""
    key = _field_key(field)
    if n <= 0:
        return []
    return heapq.nsmallest(n, aggregates, key=lambda a: (-key(a), a.category))


def top_by_fatalities(aggregates: Iterable[CategoryAggregate], n: int = DEFAULT_TOP_N) -> List[CategoryAggregate]:
    return top_n(aggregates, "fatalities", n)


def top_by_injuries(aggregates: Iterable[CategoryAggregate], n: int = DEFAULT_TOP_N) -> List[CategoryAggregate]:
    return top_n(aggregates, "injuries", n)


def top_by_cost(aggregates: Iterable[CategoryAggregate], n: int = DEFAULT_TOP_N) -> List[CategoryAggregate]:
    return top_n(aggregates, "total_cost", n)
