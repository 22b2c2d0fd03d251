# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Benchmark runner.

The runner owns a set of named datasets and a list of cutoffs. Ground truth
for every (dataset, k) is the exhaustive TF-IDF top-k: every document is
scored, and only documents with a positive score qualify. An algorithm is a
pair of callables:

    build_fn(documents) -> handle
    search_fn(handle, query_terms, k) -> [(doc_id, score), ...]

`run_algorithm` times the build once, then for each k measures per-query
latency and recall@k against the cached ground truth.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from rankr.benchmark.datasets import BenchmarkDataset, SyntheticQuery
from rankr.benchmark.metrics import BenchmarkMetrics, MetricStatistics, recall_at_k
from rankr.logging.logger import get_logger
from rankr.retrieve.expansion import QueryExpander, expand_query_with_prf
from rankr.retrieve.index import InvertedIndex, top_k
from rankr.retrieve.query_likelihood import (
    QueryLikelihoodParams,
    SmoothingMethod,
    retrieve_query_likelihood,
)
from rankr.retrieve.tfidf import TfIdfParams, retrieve_tfidf, score_tfidf

logger = get_logger(__name__)

DEFAULT_K_VALUES = (1, 10, 100)

Documents = Sequence[tuple[str, list[str]]]
BuildFn = Callable[[Documents], Any]
SearchFn = Callable[[Any, list[str], int], list[tuple[str, float]]]


@dataclass(frozen=True)
class BenchmarkResult:
    algorithm: str
    dataset: str
    k: int
    num_queries: int
    stats: MetricStatistics


def build_inverted_index(documents: Documents) -> InvertedIndex:
    index = InvertedIndex()
    for doc_id, terms in documents:
        index.add_document(doc_id, terms)
    return index


def exhaustive_tfidf(index: InvertedIndex, query_terms: list[str], k: int) -> list[str]:
    scores = {doc_id: score_tfidf(index, doc_id, query_terms) for doc_id in index.document_ids()}
    positive = {doc_id: score for doc_id, score in scores.items() if score > 0}
    return [doc_id for doc_id, _ in top_k(positive, k)]


class BenchmarkRunner:
    def __init__(
        self,
        k_values: Sequence[int] = DEFAULT_K_VALUES,
        max_test_queries: int | None = None,
    ) -> None:
        self.k_values = sorted(set(k_values))
        self.max_test_queries = max_test_queries
        self.datasets: dict[str, BenchmarkDataset] = {}
        self._reference_indexes: dict[str, InvertedIndex] = {}
        self._ground_truth: dict[tuple[str, int], list[list[str]]] = {}

    def add_dataset(self, dataset: BenchmarkDataset) -> None:
        self.datasets[dataset.name] = dataset

    def _test_queries(self, dataset: BenchmarkDataset) -> list[SyntheticQuery]:
        if self.max_test_queries is None:
            return list(dataset.queries)
        return list(dataset.queries[: self.max_test_queries])

    def _reference_index(self, dataset_name: str) -> InvertedIndex:
        if dataset_name not in self._reference_indexes:
            self._reference_indexes[dataset_name] = build_inverted_index(
                self.datasets[dataset_name].documents
            )
        return self._reference_indexes[dataset_name]

    def precompute_ground_truth(self) -> None:
        for name, dataset in self.datasets.items():
            index = self._reference_index(name)
            queries = self._test_queries(dataset)
            for k in self.k_values:
                key = (name, k)
                if key in self._ground_truth:
                    continue
                self._ground_truth[key] = [exhaustive_tfidf(index, q.terms, k) for q in queries]
                logger.info(
                    "Ground truth computed",
                    extra={"dataset": name, "k": k, "queries": len(queries)},
                )

    def ground_truth(self, dataset_name: str, k: int) -> list[list[str]]:
        key = (dataset_name, k)
        if key not in self._ground_truth:
            dataset = self.datasets[dataset_name]
            index = self._reference_index(dataset_name)
            self._ground_truth[key] = [
                exhaustive_tfidf(index, q.terms, k) for q in self._test_queries(dataset)
            ]
        return self._ground_truth[key]

    def run_algorithm(
        self,
        name: str,
        build_fn: BuildFn,
        search_fn: SearchFn,
        dataset_name: str,
    ) -> list[BenchmarkResult]:
        """
        Raises:
            KeyError: If `dataset_name` was never added.
        """
        dataset = self.datasets[dataset_name]
        queries = self._test_queries(dataset)

        build_start = time.perf_counter()
        handle = build_fn(dataset.documents)
        build_time = time.perf_counter() - build_start

        results: list[BenchmarkResult] = []
        for k in self.k_values:
            truth = self.ground_truth(dataset_name, k)
            metrics = BenchmarkMetrics(build_time_seconds=build_time)
            for query, expected in zip(queries, truth):
                start = time.perf_counter()
                retrieved = search_fn(handle, query.terms, k)
                metrics.query_times_ms.append((time.perf_counter() - start) * 1000.0)

                retrieved_ids = [doc_id for doc_id, _ in retrieved]
                metrics.recall_at_k.append(recall_at_k(expected, retrieved_ids, k))
                metrics.known_item_hits.append(1.0 if query.source_doc in retrieved_ids[:k] else 0.0)

            total_seconds = sum(metrics.query_times_ms) / 1000.0
            metrics.throughput_qps = len(queries) / total_seconds if total_seconds > 0 else 0.0

            stats = metrics.statistics()
            results.append(
                BenchmarkResult(
                    algorithm=name,
                    dataset=dataset_name,
                    k=k,
                    num_queries=len(queries),
                    stats=stats,
                )
            )
            logger.info(
                "Benchmark measured",
                extra={
                    "algorithm": name,
                    "dataset": dataset_name,
                    "k": k,
                    "recall_mean": round(stats.recall_mean, 4),
                    "p95_ms": round(stats.query_time_p95_ms, 3),
                },
            )
        return results


def lexical_algorithms() -> dict[str, tuple[BuildFn, SearchFn]]:
    """The built-in retrievers, ready for `run_algorithm`."""
    smoothed = TfIdfParams.smoothed()
    dirichlet = QueryLikelihoodParams(SmoothingMethod.dirichlet())
    jelinek = QueryLikelihoodParams(SmoothingMethod.jelinek_mercer())
    expander = QueryExpander()

    def prf_search(index: InvertedIndex, terms: list[str], k: int) -> list[tuple[str, float]]:
        return expand_query_with_prf(
            index,
            terms,
            initial_k=max(k, expander.prf_depth),
            final_k=k,
            expander=expander,
            retrieve_fn=lambda idx, q, n: retrieve_tfidf(idx, q, n),
        )

    return {
        "tfidf": (build_inverted_index, lambda idx, terms, k: retrieve_tfidf(idx, terms, k)),
        "tfidf-smoothed": (
            build_inverted_index,
            lambda idx, terms, k: retrieve_tfidf(idx, terms, k, smoothed),
        ),
        "ql-dirichlet": (
            build_inverted_index,
            lambda idx, terms, k: retrieve_query_likelihood(idx, terms, k, dirichlet),
        ),
        "ql-jelinek-mercer": (
            build_inverted_index,
            lambda idx, terms, k: retrieve_query_likelihood(idx, terms, k, jelinek),
        ),
        "tfidf-prf": (build_inverted_index, prf_search),
    }
