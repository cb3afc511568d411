"""
Dataset loader (compressed CSV -> RawEventRecord list)
======================================================

Reads the NOAA storm database export (a bzip2-compressed CSV with a header
row) and converts each usable row into a `RawEventRecord`.

Key ideas:
- Only the eight columns we need are read; other columns are ignored.
- Column names are matched case/punctuation-insensitively.
- Everything is read as text first, then converted with small helpers, so a
  bad cell can be detected per row.
- Rows with a malformed date or a bad count/magnitude are dropped (and
  counted), the rest of the file is still used.
"""

from __future__ import annotations
import logging
import math
import os
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional

import pandas as pd

from .models import RawEventRecord

logger = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y %H:%M:%S"

# field -> accepted column names (first match wins)
REQUIRED_COLUMNS: Dict[str, tuple] = {
    "event_type": ("EVTYPE", "EVENT_TYPE"),
    "begin_date": ("BGN_DATE", "BEGIN_DATE"),
    "fatalities": ("FATALITIES",),
    "injuries": ("INJURIES",),
    "prop_dmg": ("PROPDMG",),
    "prop_exp": ("PROPDMGEXP",),
    "crop_dmg": ("CROPDMG",),
    "crop_exp": ("CROPDMGEXP",),
}


@dataclass
class LoadResult:
    """Records that parsed cleanly, plus how many rows were dropped."""
    records: List[RawEventRecord]
    dropped: int = 0


def _to_int(x) -> Optional[int]:
    """Convert a cell to a non-negative whole number, returning None if missing/invalid or fractional."""
    if pd.isna(x): return None
    try: v = float(x)
    except (TypeError, ValueError): return None
    if not math.isfinite(v) or v < 0 or not v.is_integer(): return None
    return int(v)


def _to_float(x) -> Optional[float]:
    """Convert a cell to a finite, non-negative float, returning None if missing/invalid."""
    if pd.isna(x): return None
    try: v = float(x)
    except (TypeError, ValueError): return None
    if not math.isfinite(v) or v < 0: return None
    return v


def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x).strip()


def _to_date(x) -> Optional[date]:
    if pd.isna(x): return None
    try: return datetime.strptime(str(x).strip(), DATE_FORMAT).date()
    except ValueError: return None


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(columns: List[str], *names: str) -> str:
    for n in names:
        if n in columns:
            return n
    norm_map = {_norm(c): c for c in columns}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={columns}")


def parse_row(row: Dict[str, object]) -> Optional[RawEventRecord]:
    """Build a record from a {field: cell} mapping, or None if the row is unusable."""
    begin = _to_date(row["begin_date"])
    fatalities = _to_int(row["fatalities"])
    injuries = _to_int(row["injuries"])
    prop_dmg = _to_float(row["prop_dmg"])
    crop_dmg = _to_float(row["crop_dmg"])
    if begin is None or None in (fatalities, injuries, prop_dmg, crop_dmg):
        return None
    return RawEventRecord(
        event_type=_to_str(row["event_type"]),
        begin_date=begin,
        fatalities=fatalities,
        injuries=injuries,
        prop_dmg=prop_dmg,
        prop_exp=_to_str(row["prop_exp"]),
        crop_dmg=crop_dmg,
        crop_exp=_to_str(row["crop_exp"]),
    )


def load_storm_csv(path: str) -> LoadResult:
    """
    Load the storm event CSV (plain or compressed; compression is inferred
    from the file extension, e.g. `repdata_data_StormData.csv.bz2`).

    Raises:
        FileNotFoundError: the file does not exist.
        KeyError: a required column is missing from the header.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Dataset not found: {path}")

    header = pd.read_csv(path, nrows=0, compression="infer")
    columns = [str(c).strip() for c in header.columns]
    header_by_stripped = {str(c).strip(): c for c in header.columns}
    resolved = {field: header_by_stripped[_col(columns, *names)] for field, names in REQUIRED_COLUMNS.items()}

    logger.info("Reading %s", path)
    df = pd.read_csv(
        path,
        usecols=list(resolved.values()),
        dtype=str,
        keep_default_na=False,
        na_values=[""],
        compression="infer",
    )
    df = df.rename(columns={col: field for field, col in resolved.items()})

    records: List[RawEventRecord] = []
    dropped = 0
    for row in df.to_dict(orient="records"):
        rec = parse_row(row)
        if rec is None:
            dropped += 1
            continue
        records.append(rec)

    if dropped:
        logger.warning("Dropped %d malformed rows (bad date or numeric field)", dropped)
    logger.info("Loaded %d records from %s", len(records), os.path.basename(path))
    return LoadResult(records=records, dropped=dropped)
