# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Summary statistics, robustness and significance testing.

Used by `rankr compare` to decide whether two runs really differ, and by the
benchmark runner to summarize per-query recall and latency distributions.
The summary functions return 0.0 on empty input instead of raising.
"""

import math
import random
from dataclasses import dataclass
from typing import Sequence

from rankr.eval.errors import EvalError, LengthMismatchError
from rankr.eval.models import EvalResult, RunComparison

ROBUSTNESS_THRESHOLDS = (0.5, 0.7, 0.8, 0.9, 0.95, 0.99)


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation."""
    if not values:
        return 0.0
    mu = mean(values)
    return math.sqrt(sum((v - mu) ** 2 for v in values) / len(values))


def percentile(values: Sequence[float], p: float) -> float:
    """
    Nearest-rank percentile: the sorted value at index round(p * (n - 1)),
    with halves rounded away from zero.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    index = int(math.floor(p * (len(ordered) - 1) + 0.5))
    return ordered[min(max(index, 0), len(ordered) - 1)]


def robustness_delta(values: Sequence[float], delta: float) -> float:
    """Fraction of values at or above `delta`."""
    if not values:
        return 0.0
    return sum(1 for v in values if v >= delta) / len(values)


@dataclass(frozen=True)
class RobustnessMetrics:
    robustness_50: float
    robustness_70: float
    robustness_80: float
    robustness_90: float
    robustness_95: float
    robustness_99: float


def robustness_metrics(values: Sequence[float]) -> RobustnessMetrics:
    return RobustnessMetrics(*(robustness_delta(values, t) for t in ROBUSTNESS_THRESHOLDS))


def paired_randomization_test(
    a: Sequence[float],
    b: Sequence[float],
    trials: int = 10_000,
    seed: int = 42,
) -> float:
    """
    Two-sided p-value for the mean of the paired differences a - b.

    Each trial flips the sign of every difference with probability 1/2 and
    counts how often the permuted mean is at least as extreme as the observed
    one. The +1 smoothing keeps the p-value strictly positive.

    Raises:
        LengthMismatchError: If `a` and `b` differ in length.
    """
    if len(a) != len(b):
        raise LengthMismatchError(f"Paired samples differ in length: {len(a)} vs {len(b)}")
    if not a:
        return 1.0

    diffs = [x - y for x, y in zip(a, b)]
    observed = abs(sum(diffs)) / len(diffs)
    rng = random.Random(seed)

    at_least_as_extreme = 0
    for _ in range(trials):
        total = sum(d if rng.random() < 0.5 else -d for d in diffs)
        if abs(total) / len(diffs) >= observed - 1e-12:
            at_least_as_extreme += 1

    return (at_least_as_extreme + 1) / (trials + 1)


def compare_runs(
    result_a: EvalResult,
    result_b: EvalResult,
    metric: str,
    trials: int = 10_000,
    seed: int = 42,
) -> RunComparison:
    """
    Compare two evaluations of the same qrels on one metric, pairing by
    query id over the queries both results contain.

    Raises:
        EvalError: If either result lacks the metric or they share no queries.
    """
    for result in (result_a, result_b):
        if metric not in result.metric_names:
            raise EvalError(f"Metric {metric!r} not present in evaluation of {result.run_tag!r}")

    shared = sorted(set(result_a.per_query) & set(result_b.per_query))
    if not shared:
        raise EvalError("The two evaluations share no queries")

    scores_a = [result_a.per_query[q][metric] for q in shared]
    scores_b = [result_b.per_query[q][metric] for q in shared]

    wins = sum(1 for x, y in zip(scores_a, scores_b) if x > y)
    losses = sum(1 for x, y in zip(scores_a, scores_b) if x < y)

    return RunComparison(
        metric=metric,
        run_a=result_a.run_tag,
        run_b=result_b.run_tag,
        mean_a=mean(scores_a),
        mean_b=mean(scores_b),
        mean_difference=mean(scores_a) - mean(scores_b),
        p_value=paired_randomization_test(scores_a, scores_b, trials, seed),
        num_queries=len(shared),
        wins=wins,
        losses=losses,
        ties=len(shared) - wins - losses,
        trials=trials,
    )
