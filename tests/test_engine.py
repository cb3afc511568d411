"""
Tests for the end-to-end pipeline and exports.
"""

import csv
import dataclasses
import json
from datetime import date

import pytest

from stormharm.engine import EXPORT_FIELDS, analyze, run_pipeline
from conftest import make_raw


class TestRunPipeline:

    @pytest.fixture
    def analysis(self, storm_csv_bz2):
        return run_pipeline(storm_csv_bz2)

    def test_counts(self, analysis, storm_csv_bz2):
        assert analysis.dataset_path == storm_csv_bz2
        assert analysis.dropped_rows == 2
        assert analysis.excluded_pre_cutoff == 1
        assert len(analysis.records) == 5
        assert [a.category for a in analysis.aggregates] == [
            "EXCESSIVE HEAT", "FLOOD", "THUNDERSTORM WIND", "TORNADO",
        ]

    def test_thunderstorm_totals(self, analysis):
        a = analysis.get("THUNDERSTORM WIND")
        assert (a.fatalities, a.injuries, a.events) == (3, 3, 2)
        assert a.property_cost == 1_005_000.0
        assert a.crop_cost == 10_000.0

    def test_old_tornado_not_counted(self, analysis):
        a = analysis.get("TORNADO")
        assert (a.fatalities, a.injuries, a.events) == (36, 583, 1)
        assert a.total_cost == 1.5e9 + 2e6

    def test_unrecognized_exponent_gives_zero_cost(self, analysis):
        assert analysis.get("FLOOD").total_cost == 0.0

    def test_rankings(self, analysis):
        assert [a.category for a in analysis.health_ranking(3)] == [
            "TORNADO", "EXCESSIVE HEAT", "THUNDERSTORM WIND",
        ]
        assert [a.category for a in analysis.injury_ranking(1)] == ["TORNADO"]
        assert [a.category for a in analysis.economic_ranking()] == [
            "TORNADO", "THUNDERSTORM WIND", "EXCESSIVE HEAT", "FLOOD",
        ]

    def test_repeat_runs_identical(self, storm_csv_bz2, analysis):
        again = run_pipeline(storm_csv_bz2)
        assert again.aggregates == analysis.aggregates

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            run_pipeline(str(tmp_path / "missing.csv.bz2"))


class TestAnalyze:

    def test_custom_cutoff(self):
        raw = [make_raw(begin=date(1985, 1, 1)), make_raw(begin=date(1995, 1, 1))]
        assert len(analyze(raw, cutoff=date(1990, 1, 1)).records) == 1

    def test_get_unknown_category(self):
        assert analyze([make_raw()]).get("NOPE") is None

    def test_source_details_set_at_creation(self):
        analysis = analyze([make_raw()], dataset_path="storms.csv.bz2", dropped_rows=4)
        assert analysis.dataset_path == "storms.csv.bz2"
        assert analysis.dropped_rows == 4

    def test_result_is_immutable(self):
        analysis = analyze([make_raw()])
        with pytest.raises(dataclasses.FrozenInstanceError):
            analysis.dropped_rows = 1


class TestExport:

    @pytest.fixture
    def analysis(self):
        return analyze([
            make_raw(event_type="HAIL", fatalities=1, prop_dmg=2, prop_exp="K"),
            make_raw(event_type="FLOOD", injuries=4),
        ])

    def test_export_csv(self, analysis, tmp_path):
        out = tmp_path / "aggs.csv"
        analysis.export_csv(str(out))
        with open(out, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert list(rows[0].keys()) == EXPORT_FIELDS
        assert [r["category"] for r in rows] == ["FLOOD", "HAIL"]
        assert float(rows[1]["total_cost"]) == 2000.0

    def test_export_json(self, analysis, tmp_path):
        out = tmp_path / "aggs.json"
        analysis.export_json(str(out))
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data[0]["category"] == "FLOOD"
        assert data[0]["injuries_per_event"] == 4.0
        assert data[1]["fatalities"] == 1
