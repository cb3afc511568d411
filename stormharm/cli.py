"""
Command line interface
======================

Run the whole analysis once and print the two rankings:

    stormharm repdata_data_StormData.csv.bz2 --out report/storm_report.docx

The dataset file is only read, never modified.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import List, Optional

from .aggregator import DEFAULT_TOP_N
from .engine import run_pipeline
from .report import (
    DatasetCitation,
    ReportConfig,
    format_economic_table,
    format_health_table,
    generate_charts,
    generate_docx_report,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="stormharm",
        description="Rank storm event types by harm to population health and by economic damage.",
    )
    ap.add_argument("csv", help="Path to the storm data CSV (may be .bz2/.gz compressed)")
    ap.add_argument("--top", type=int, default=DEFAULT_TOP_N, help="How many categories to rank (default: 10)")
    ap.add_argument("--out", help="Write a DOCX report to this path")
    ap.add_argument("--charts-dir", help="Directory for chart images (without --out, only the charts are written)")
    ap.add_argument("--export-csv", help="Write the full aggregate table to a CSV file")
    ap.add_argument("--export-json", help="Write the full aggregate table to a JSON file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the `stormharm` console script. Returns the exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        analysis = run_pipeline(args.csv)

        print(f"Events analysed: {len(analysis.records)} | categories: {len(analysis.aggregates)}")
        print(f"\nTop {args.top} categories by fatalities:")
        print(format_health_table(analysis.health_ranking(args.top)))
        print(f"\nTop {args.top} categories by injuries:")
        print(format_health_table(analysis.injury_ranking(args.top)))
        print(f"\nTop {args.top} categories by economic damage:")
        print(format_economic_table(analysis.economic_ranking(args.top)))

        if args.export_csv:
            analysis.export_csv(args.export_csv)
            print(f"Exported CSV to {args.export_csv}")
        if args.export_json:
            analysis.export_json(args.export_json)
            print(f"Exported JSON to {args.export_json}")

        cfg = ReportConfig(
            top_n=args.top,
            citation=DatasetCitation(file_name=os.path.basename(args.csv)),
        )
        if args.out:
            generate_docx_report(analysis, args.out, config=cfg, charts_dir=args.charts_dir)
            print(f"Report written to {args.out}")
        elif args.charts_dir:
            charts = generate_charts(analysis, args.charts_dir, cfg)
            print(f"Wrote {len(charts)} charts to {args.charts_dir}")
    except (OSError, KeyError, ValueError, ImportError) as e:
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
