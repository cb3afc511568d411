"""
stormharm package
=================

Which severe weather events hurt people the most, and which cost the most?

- Dataset loading is in `stormharm/loader.py`.
- Cleaning (cutoff date, categories, damage amounts) is in `stormharm/normalizer.py`.
- Group-by totals and rankings are in `stormharm/aggregator.py`.
- `stormharm/engine.py` runs the pipeline, `stormharm/report.py` renders it.
- The CLI entry point is in `stormharm/cli.py`.
"""

__version__ = '0.1.0'
