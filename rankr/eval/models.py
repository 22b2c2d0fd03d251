# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Result types passed between the evaluation engine, statistics and reporting.

They are plain dataclasses so `dataclasses.asdict` turns them straight into
the metrics.json payload.
"""

from dataclasses import dataclass, field


@dataclass
class EvalResult:
    """
    Evaluation of one run against one qrels file.

    `aggregate` is the mean of each metric over every judged query, counting
    judged queries the run never answered as 0.
    """

    run_tag: str
    metric_names: list[str] = field(default_factory=list)
    per_query: dict[str, dict[str, float]] = field(default_factory=dict)
    aggregate: dict[str, float] = field(default_factory=dict)
    num_queries: int = 0
    missing_queries: list[str] = field(default_factory=list)
    unjudged_queries: list[str] = field(default_factory=list)
    relevance_threshold: int = 1


@dataclass(frozen=True)
class RunComparison:
    """Paired comparison of two runs on one metric."""

    metric: str
    run_a: str
    run_b: str
    mean_a: float
    mean_b: float
    mean_difference: float
    p_value: float
    num_queries: int
    wins: int
    losses: int
    ties: int
    trials: int
