# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for evaluation report and comparison output."""

import json
from pathlib import Path

import yaml

from rankr.eval.models import EvalResult, RunComparison
from rankr.eval.reporting import (
    format_comparison_text,
    format_report_text,
    write_comparison,
    write_report,
)


def _result() -> EvalResult:
    return EvalResult(
        run_tag="bm",
        metric_names=["P@5", "MAP"],
        per_query={"q1": {"P@5": 0.4, "MAP": 0.5}, "q2": {"P@5": 0.0, "MAP": 0.0}},
        aggregate={"P@5": 0.2, "MAP": 0.25},
        num_queries=2,
        missing_queries=["q2"],
    )


def _comparison(p_value: float) -> RunComparison:
    return RunComparison(
        metric="MAP",
        run_a="base",
        run_b="new",
        mean_a=0.2,
        mean_b=0.3,
        mean_difference=0.1,
        p_value=p_value,
        num_queries=10,
        wins=6,
        losses=2,
        ties=2,
        trials=1000,
    )


class TestWriteReport:
    def test_writes_metrics_and_text(self, tmp_path: Path) -> None:
        out = write_report(_result(), tmp_path / "report")
        metrics = json.loads((out / "metrics.json").read_text(encoding="utf-8"))
        assert metrics["aggregate"] == {"P@5": 0.2, "MAP": 0.25}
        assert metrics["per_query"]["q1"]["MAP"] == 0.5
        assert "RANKR EVALUATION REPORT" in (out / "report.txt").read_text(encoding="utf-8")
        assert not (out / "config_snapshot.yaml").exists()

    def test_config_snapshot(self, tmp_path: Path) -> None:
        out = write_report(_result(), tmp_path, config_snapshot={"eval": {"k_values": [5]}})
        snapshot = yaml.safe_load((out / "config_snapshot.yaml").read_text(encoding="utf-8"))
        assert snapshot == {"eval": {"k_values": [5]}}


class TestReportText:
    def test_lists_missing_queries(self) -> None:
        text = format_report_text(_result())
        assert "Run: bm" in text
        assert "MAP  0.2500" in text
        assert "QUERIES MISSING FROM RUN" in text
        assert "  q2" in text


class TestComparison:
    def test_significance_verdict(self) -> None:
        assert "(significant at 0.05)" in format_comparison_text(_comparison(0.01))
        assert "not significant" in format_comparison_text(_comparison(0.2))

    def test_difference_is_signed(self) -> None:
        assert "Difference: +0.1000" in format_comparison_text(_comparison(0.5))

    def test_write_comparison(self, tmp_path: Path) -> None:
        path = write_comparison(_comparison(0.04), tmp_path / "cmp")
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert path.name == "comparison.json"
        assert payload["wins"] == 6
        assert payload["p_value"] == 0.04
