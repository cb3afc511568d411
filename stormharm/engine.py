"""
Analysis engine
===============

Ties the stages together:

1) Load dataset -> list of RawEventRecord (immutable)
2) Drop records before the cutoff date, normalize the rest
3) Aggregate by canonical category
4) Serve ranked views and exports from the aggregate table

Everything runs once, in memory, in a single thread. Running it twice on the
same file gives identical tables.
"""

from __future__ import annotations
import csv
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .aggregator import DEFAULT_TOP_N, aggregate, top_by_cost, top_by_fatalities, top_by_injuries
from .loader import load_storm_csv
from .models import CategoryAggregate, NormalizedEventRecord, RawEventRecord
from .normalizer import CUTOFF_DATE, normalize_events

logger = logging.getLogger(__name__)

EXPORT_FIELDS = [
    "category", "events", "fatalities", "injuries",
    "property_cost", "crop_cost", "total_cost",
    "fatalities_per_event", "injuries_per_event", "cost_per_event",
]


@dataclass(frozen=True)
class StormAnalysis:
    """Result of one pipeline run.

    `records` holds only post-cutoff normalized records; `aggregates` is
    sorted by category label.
    """
    records: List[NormalizedEventRecord]
    aggregates: List[CategoryAggregate]
    cutoff: date = CUTOFF_DATE
    dataset_path: Optional[str] = None
    dropped_rows: int = 0
    excluded_pre_cutoff: int = 0

    # ---------------- Ranked views ----------------
    def health_ranking(self, n: int = DEFAULT_TOP_N) -> List[CategoryAggregate]:
        return top_by_fatalities(self.aggregates, n)

    def injury_ranking(self, n: int = DEFAULT_TOP_N) -> List[CategoryAggregate]:
        return top_by_injuries(self.aggregates, n)

    def economic_ranking(self, n: int = DEFAULT_TOP_N) -> List[CategoryAggregate]:
        return top_by_cost(self.aggregates, n)

    def get(self, category: str) -> Optional[CategoryAggregate]:
        for a in self.aggregates:
            if a.category == category:
                return a
        return None

    # ---------------- Export ----------------
    def export_csv(self, path: str) -> None:
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(EXPORT_FIELDS)
            for row in self._export_rows():
                w.writerow([row[k] for k in EXPORT_FIELDS])

    def export_json(self, path: str) -> None:
        """Export the aggregate table as a JSON list (one object per category)."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._export_rows(), f, ensure_ascii=False, indent=2)

    def _export_rows(self) -> List[Dict[str, Any]]:
        return [
            {
                "category": a.category,
                "events": a.events,
                "fatalities": a.fatalities,
                "injuries": a.injuries,
                "property_cost": a.property_cost,
                "crop_cost": a.crop_cost,
                "total_cost": a.total_cost,
                "fatalities_per_event": a.fatalities_per_event(),
                "injuries_per_event": a.injuries_per_event(),
                "cost_per_event": a.cost_per_event(),
            }
            for a in self.aggregates
        ]


def analyze(
    raw_records: Iterable[RawEventRecord],
    cutoff: date = CUTOFF_DATE,
    *,
    dataset_path: Optional[str] = None,
    dropped_rows: int = 0,
) -> StormAnalysis:
    """Run normalize + aggregate over records already in memory.

    `dataset_path` and `dropped_rows` describe where the records came from
    and are only carried into the result.
    """
    raw_records = list(raw_records)
    records = normalize_events(raw_records, cutoff)
    aggregates = aggregate(records)
    logger.info("Aggregated %d records into %d categories", len(records), len(aggregates))
    return StormAnalysis(
        records=records,
        aggregates=aggregates,
        cutoff=cutoff,
        dataset_path=dataset_path,
        dropped_rows=dropped_rows,
        excluded_pre_cutoff=len(raw_records) - len(records),
    )


def run_pipeline(path: str, cutoff: date = CUTOFF_DATE) -> StormAnalysis:
    """Load the dataset at `path` and analyze it."""
    loaded = load_storm_csv(path)
    return analyze(loaded.records, cutoff, dataset_path=path, dropped_rows=loaded.dropped)
