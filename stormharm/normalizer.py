"""
Record normalizer
=================

Turns raw storm records into analysis-ready records:

1) Drop everything that began before `CUTOFF_DATE` (older years only
   recorded a handful of event types, so they would skew the comparison).
2) Map the free-text event type to a canonical category using
   `CATEGORY_RULES`.
3) Convert (magnitude, exponent code) pairs into US$ using
   `EXPONENT_MULTIPLIERS`.

The category rules are plain substring replacements applied in order, and
each rule sees the output of the previous one. Near-synonyms beyond these
rules (e.g. "HIGH WIND" vs "HIGH WINDS 63") are NOT merged.
"""

from __future__ import annotations
import logging
from datetime import date
from typing import Dict, Iterable, List, Tuple

from .models import NormalizedEventRecord, RawEventRecord

logger = logging.getLogger(__name__)

CUTOFF_DATE = date(1980, 1, 1)

# Exponent code -> multiplier. Any other code (blank, "?", "+", digits...) means 0 US$.
EXPONENT_MULTIPLIERS: Dict[str, float] = {
    "H": 1e2,
    "K": 1e3,
    "M": 1e6,
    "B": 1e9,
}

# (substring, replacement), applied top to bottom on the upper-cased label
CATEGORY_RULES: Tuple[Tuple[str, str], ...] = (
    ("TSTM", "THUNDERSTORM"),
    ("THUNDERSTORMS", "THUNDERSTORM"),
    ("WINDS", "WIND"),
)


def multiplier(code: str) -> float:
    """Return the multiplier for an exponent code, 0.0 if the code is not recognized."""
    if not code:
        return 0.0
    return EXPONENT_MULTIPLIERS.get(code.strip().upper(), 0.0)


def damage_amount(magnitude: float, code: str) -> float:
    """Absolute damage in US$ for a magnitude and its exponent code."""
    m = multiplier(code)
    if m == 0.0:
        return 0.0
    return magnitude * m


def canonical_category(label: str) -> str:
    out = label.upper()
    for pattern, replacement in CATEGORY_RULES:
        out = out.replace(pattern, replacement)
    return out


def filter_cutoff(records: Iterable[RawEventRecord], cutoff: date = CUTOFF_DATE) -> List[RawEventRecord]:
    """Keep only records whose begin date is on or after `cutoff`."""
    kept = [r for r in records if r.begin_date >= cutoff]
    return kept


def normalize_record(raw: RawEventRecord) -> NormalizedEventRecord:
    return NormalizedEventRecord(
        raw=raw,
        category=canonical_category(raw.event_type),
        property_cost=damage_amount(raw.prop_dmg, raw.prop_exp),
        crop_cost=damage_amount(raw.crop_dmg, raw.crop_exp),
    )


def normalize_records(records: Iterable[RawEventRecord]) -> List[NormalizedEventRecord]:
    """Normalize every record, preserving length and order."""
    return [normalize_record(r) for r in records]


def normalize_events(
    records: Iterable[RawEventRecord],
    cutoff: date = CUTOFF_DATE,
) -> List[NormalizedEventRecord]:
    """Apply the cutoff filter, then normalize what is left."""
    records = list(records)
    kept = filter_cutoff(records, cutoff)
    excluded = len(records) - len(kept)
    if excluded:
        logger.info("Excluded %d records dated before %s", excluded, cutoff.isoformat())
    return normalize_records(kept)
