# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Benchmark metrics: recall@k against exhaustive ground truth, plus the
distribution summaries (mean, std, percentiles, robustness) that make a
single recall number trustworthy.
"""

from dataclasses import dataclass, field
from typing import Sequence

from rankr.eval.statistics import (
    RobustnessMetrics,
    mean,
    percentile,
    robustness_metrics,
    std_dev,
)


def recall_at_k(ground_truth: Sequence[str], retrieved: Sequence[str], k: int) -> float:
    """|gt[:k] & retrieved[:k]| / min(|gt|, k); 0.0 for empty ground truth or k == 0."""
    if not ground_truth or k <= 0:
        return 0.0
    overlap = set(ground_truth[:k]) & set(retrieved[:k])
    return len(overlap) / min(len(ground_truth), k)


@dataclass(frozen=True)
class MetricStatistics:
    recall_mean: float
    recall_std: float
    recall_p50: float
    recall_p95: float
    recall_p99: float
    robustness: RobustnessMetrics
    known_item_success: float
    query_time_mean_ms: float
    query_time_p50_ms: float
    query_time_p95_ms: float
    query_time_p99_ms: float
    build_time_seconds: float
    throughput_qps: float


@dataclass
class BenchmarkMetrics:
    recall_at_k: list[float] = field(default_factory=list)
    query_times_ms: list[float] = field(default_factory=list)
    known_item_hits: list[float] = field(default_factory=list)
    build_time_seconds: float = 0.0
    throughput_qps: float = 0.0

    def statistics(self) -> MetricStatistics:
        return MetricStatistics(
            recall_mean=mean(self.recall_at_k),
            recall_std=std_dev(self.recall_at_k),
            recall_p50=percentile(self.recall_at_k, 0.50),
            recall_p95=percentile(self.recall_at_k, 0.95),
            recall_p99=percentile(self.recall_at_k, 0.99),
            robustness=robustness_metrics(self.recall_at_k),
            known_item_success=mean(self.known_item_hits),
            query_time_mean_ms=mean(self.query_times_ms),
            query_time_p50_ms=percentile(self.query_times_ms, 0.50),
            query_time_p95_ms=percentile(self.query_times_ms, 0.95),
            query_time_p99_ms=percentile(self.query_times_ms, 0.99),
            build_time_seconds=self.build_time_seconds,
            throughput_qps=self.throughput_qps,
        )
