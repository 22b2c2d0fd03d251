# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the evaluation engine: metric naming, per-query scores, aggregates."""

import pytest

from rankr.eval.engine import evaluate_run, expand_metric_names
from rankr.eval.errors import EvalError
from rankr.eval.trec import Qrels, TrecRun


@pytest.fixture()
def qrels() -> Qrels:
    return Qrels(
        {
            "q1": {"d1": 2, "d2": 0, "d3": 1},
            "q2": {"d9": 1},
            "q3": {"d5": 1},
        }
    )


@pytest.fixture()
def run() -> TrecRun:
    return TrecRun(
        {
            "q1": [("d1", 3.0), ("d2", 2.0), ("d3", 1.0)],
            "q2": [("d8", 1.0), ("d9", 0.5)],
            "q4": [("d1", 1.0)],
        },
        tag="test-run",
    )


class TestMetricNames:
    def test_expands_cutoff_metrics(self) -> None:
        assert expand_metric_names(["P", "MAP"], [10, 5, 5]) == ["P@5", "P@10", "MAP"]

    def test_unknown_metric(self) -> None:
        with pytest.raises(EvalError, match="Unknown metric"):
            expand_metric_names(["BLEU"], [5])


class TestEvaluateRun:
    def test_per_query_scores(self, run: TrecRun, qrels: Qrels) -> None:
        result = evaluate_run(run, qrels, metrics=["P", "MAP", "MRR"], k_values=[2])
        assert result.per_query["q1"]["P@2"] == pytest.approx(0.5)
        assert result.per_query["q1"]["MAP"] == pytest.approx((1.0 + 2 / 3) / 2)
        assert result.per_query["q2"]["MRR"] == pytest.approx(0.5)

    def test_missing_queries_score_zero(self, run: TrecRun, qrels: Qrels) -> None:
        result = evaluate_run(run, qrels, metrics=["MAP"], k_values=[5])
        assert result.missing_queries == ["q3"]
        assert result.per_query["q3"] == {"MAP": 0.0}
        assert result.num_queries == 3

    def test_unjudged_queries_are_skipped(self, run: TrecRun, qrels: Qrels) -> None:
        result = evaluate_run(run, qrels, metrics=["MAP"], k_values=[5])
        assert result.unjudged_queries == ["q4"]
        assert "q4" not in result.per_query

    def test_aggregate_is_mean_over_judged_queries(self, run: TrecRun, qrels: Qrels) -> None:
        result = evaluate_run(run, qrels, metrics=["MRR"], k_values=[5])
        assert result.aggregate["MRR"] == pytest.approx((1.0 + 0.5 + 0.0) / 3)

    def test_relevance_threshold(self, run: TrecRun, qrels: Qrels) -> None:
        result = evaluate_run(run, qrels, metrics=["R"], k_values=[3], relevance_threshold=2)
        # Only d1 (grade 2) counts as relevant for q1.
        assert result.per_query["q1"]["R@3"] == 1.0
        assert result.relevance_threshold == 2

    def test_graded_metrics_use_grades(self, run: TrecRun, qrels: Qrels) -> None:
        result = evaluate_run(run, qrels, metrics=["nDCG", "ERR"], k_values=[3])
        assert 0.0 < result.per_query["q1"]["nDCG@3"] <= 1.0
        # ERR uses the qrels-wide max grade (2): stop(d1) = 3/4, stop(d3) = 1/4.
        expected = 0.75 + 0.25 * 0.25 / 3
        assert result.per_query["q1"]["ERR@3"] == pytest.approx(expected)

    def test_metric_names_recorded(self, run: TrecRun, qrels: Qrels) -> None:
        result = evaluate_run(run, qrels, metrics=["Success", "R-Prec"], k_values=[1])
        assert result.metric_names == ["Success@1", "R-Prec"]
        assert result.run_tag == "test-run"

    def test_empty_qrels(self, run: TrecRun) -> None:
        result = evaluate_run(run, Qrels(), metrics=["MAP"], k_values=[5])
        assert result.aggregate == {"MAP": 0.0}
        assert result.num_queries == 0
