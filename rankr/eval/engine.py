# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Evaluation engine: run + qrels in, per-query and aggregate metrics out.

Metric names follow trec_eval-ish conventions:

  P@k, R@k, nDCG@k, Success@k, ERR@k   one entry per cutoff in k_values
  MAP, MRR, R-Prec                     computed over the full ranking

Binary metrics treat docs graded >= relevance_threshold as relevant.
nDCG and ERR use the grades directly (exponential gain), with ERR's maximum
grade taken from the whole qrels file so every query shares one scale.

Everything here is deterministic: queries are processed in sorted id order.
"""

from typing import Callable, Sequence

from rankr.eval.errors import EvalError
from rankr.eval.metrics.binary import (
    average_precision,
    hit_rate_at_k,
    precision_at_k,
    r_precision,
    recall_at_k,
    reciprocal_rank,
)
from rankr.eval.metrics.graded import compute_err, compute_ndcg
from rankr.eval.models import EvalResult
from rankr.eval.trec import Qrels, TrecRun
from rankr.logging.logger import get_logger

logger = get_logger(__name__)

CUTOFF_METRICS = ("P", "R", "nDCG", "Success", "ERR")
GLOBAL_METRICS = ("MAP", "MRR", "R-Prec")
DEFAULT_METRICS = ("MAP", "MRR", "nDCG", "P", "R")
DEFAULT_K_VALUES = (5, 10, 20)

# (ranked, relevant set, grades, k, max grade) -> value
_MetricFn = Callable[[list[str], set[str], dict[str, int], int, int], float]

_CUTOFF_FNS: dict[str, _MetricFn] = {
    "P": lambda ranked, rel, _g, k, _m: precision_at_k(ranked, rel, k),
    "R": lambda ranked, rel, _g, k, _m: recall_at_k(ranked, rel, k),
    "Success": lambda ranked, rel, _g, k, _m: hit_rate_at_k(ranked, rel, k),
    "nDCG": lambda ranked, _r, grades, k, _m: compute_ndcg(ranked, grades, k),
    "ERR": lambda ranked, _r, grades, k, max_grade: compute_err(ranked, grades, k, max_grade),
}

_GLOBAL_FNS: dict[str, _MetricFn] = {
    "MAP": lambda ranked, rel, _g, _k, _m: average_precision(ranked, rel),
    "MRR": lambda ranked, rel, _g, _k, _m: reciprocal_rank(ranked, rel),
    "R-Prec": lambda ranked, rel, _g, _k, _m: r_precision(ranked, rel),
}


def expand_metric_names(metrics: Sequence[str], k_values: Sequence[int]) -> list[str]:
    """
    Turn family names into concrete column names, e.g. ["P", "MAP"] with
    k_values [5, 10] becomes ["P@5", "P@10", "MAP"].

    Raises:
        EvalError: For an unknown metric family.
    """
    names: list[str] = []
    for metric in metrics:
        if metric in CUTOFF_METRICS:
            names.extend(f"{metric}@{k}" for k in sorted(set(k_values)))
        elif metric in GLOBAL_METRICS:
            names.append(metric)
        else:
            raise EvalError(
                f"Unknown metric {metric!r}; expected one of "
                f"{', '.join(CUTOFF_METRICS + GLOBAL_METRICS)}"
            )
    return names


def _score_query(
    ranked: list[str],
    relevant: set[str],
    grades: dict[str, int],
    metric_names: list[str],
    max_grade: int,
) -> dict[str, float]:
    scores: dict[str, float] = {}
    for name in metric_names:
        family, _, cutoff = name.partition("@")
        if cutoff:
            scores[name] = _CUTOFF_FNS[family](ranked, relevant, grades, int(cutoff), max_grade)
        else:
            scores[name] = _GLOBAL_FNS[family](ranked, relevant, grades, 0, max_grade)
    return scores


def evaluate_run(
    run: TrecRun,
    qrels: Qrels,
    metrics: Sequence[str] = DEFAULT_METRICS,
    k_values: Sequence[int] = DEFAULT_K_VALUES,
    relevance_threshold: int = 1,
) -> EvalResult:
    """
    Score every judged query in the run.

    Judged queries the run never answered score 0 on every metric and are
    listed in `missing_queries`. Run queries with no judgments are skipped
    and listed in `unjudged_queries`.
    """
    metric_names = expand_metric_names(metrics, k_values)
    max_grade = qrels.max_grade()

    per_query: dict[str, dict[str, float]] = {}
    missing: list[str] = []
    for query_id in qrels.query_ids():
        if query_id not in run:
            missing.append(query_id)
            per_query[query_id] = {name: 0.0 for name in metric_names}
            continue
        per_query[query_id] = _score_query(
            run.ranked_doc_ids(query_id),
            qrels.relevant_docs(query_id, relevance_threshold),
            qrels.grades(query_id),
            metric_names,
            max_grade,
        )

    unjudged = [query_id for query_id in run.query_ids() if query_id not in qrels]

    aggregate: dict[str, float] = {}
    for name in metric_names:
        values = [scores[name] for scores in per_query.values()]
        aggregate[name] = sum(values) / len(values) if values else 0.0

    if missing or unjudged:
        logger.warning(
            "Run and qrels cover different queries",
            extra={"missing_from_run": len(missing), "unjudged_in_run": len(unjudged)},
        )

    logger.info(
        "Run evaluated",
        extra={"run_tag": run.tag, "queries": len(per_query), "metrics": len(metric_names)},
    )

    return EvalResult(
        run_tag=run.tag,
        metric_names=metric_names,
        per_query=per_query,
        aggregate=aggregate,
        num_queries=len(per_query),
        missing_queries=missing,
        unjudged_queries=unjudged,
        relevance_threshold=relevance_threshold,
    )
