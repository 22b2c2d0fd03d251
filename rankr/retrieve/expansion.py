# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pseudo-relevance feedback (PRF) query expansion.

The flow is: retrieve once, treat the top `prf_depth` documents as relevant,
pick the best new terms from those documents, append them to the query at a
reduced weight, and retrieve again.

Three term selection methods are available:
  - ROBERTSON_SELECTION: r * w_RSJ, the Robertson selection value, where r is
    the number of feedback documents containing the term
  - TERM_FREQUENCY: total occurrences across the feedback documents
  - IDF_WEIGHTED: feedback occurrences times ln(N / df)
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Sequence

from rankr.config.schema import ExpansionConfig
from rankr.logging.logger import get_logger
from rankr.retrieve.index import InvertedIndex, Query, ScoredDoc, weighted_terms

logger = get_logger(__name__)

RetrieveFn = Callable[[InvertedIndex, Query, int], list[ScoredDoc]]


class ExpansionMethod(Enum):
    ROBERTSON_SELECTION = "robertson_selection"
    TERM_FREQUENCY = "term_frequency"
    IDF_WEIGHTED = "idf_weighted"


@dataclass(frozen=True)
class QueryExpander:
    prf_depth: int = 5
    max_expansion_terms: int = 5
    expansion_weight: float = 0.5
    method: ExpansionMethod = ExpansionMethod.IDF_WEIGHTED

    def __post_init__(self) -> None:
        object.__setattr__(self, "expansion_weight", min(max(self.expansion_weight, 0.0), 1.0))

    def with_prf_depth(self, depth: int) -> "QueryExpander":
        return replace(self, prf_depth=depth)

    def with_max_expansion_terms(self, max_terms: int) -> "QueryExpander":
        return replace(self, max_expansion_terms=max_terms)

    def with_expansion_weight(self, weight: float) -> "QueryExpander":
        return replace(self, expansion_weight=weight)

    def with_method(self, method: ExpansionMethod) -> "QueryExpander":
        return replace(self, method=method)

    @classmethod
    def from_config(cls, config: ExpansionConfig) -> "QueryExpander":
        return cls(
            prf_depth=config.prf_depth,
            max_expansion_terms=config.max_expansion_terms,
            expansion_weight=config.expansion_weight,
            method=ExpansionMethod(config.method),
        )


def _feedback_statistics(
    index: InvertedIndex,
    feedback_doc_ids: Sequence[str],
) -> tuple[dict[str, int], dict[str, int]]:
    """Per term: total tf across feedback docs, and number of feedback docs containing it."""
    total_tf: dict[str, int] = {}
    doc_count: dict[str, int] = {}
    for doc_id in dict.fromkeys(feedback_doc_ids):
        for term, tf in index.document_terms(doc_id).items():
            total_tf[term] = total_tf.get(term, 0) + tf
            doc_count[term] = doc_count.get(term, 0) + 1
    return total_tf, doc_count


def _robertson_selection_value(r: int, big_r: int, df: int, n: int) -> float:
    weight = math.log(
        ((r + 0.5) * (n - df - big_r + r + 0.5)) / ((big_r - r + 0.5) * (df - r + 0.5))
    )
    return r * weight


def select_expansion_terms(
    index: InvertedIndex,
    feedback_doc_ids: Sequence[str],
    query_terms: Query,
    expander: QueryExpander,
) -> list[str]:
    """
    Choose up to `max_expansion_terms` new terms from the feedback documents.
    Terms already in the query are never selected. Ties go to the
    alphabetically smaller term.
    """
    if expander.max_expansion_terms <= 0 or not feedback_doc_ids:
        return []

    total_tf, doc_count = _feedback_statistics(index, feedback_doc_ids)
    original = {term for term, _ in weighted_terms(query_terms)}
    n = index.num_docs
    big_r = len(dict.fromkeys(feedback_doc_ids))

    scored: list[tuple[str, float]] = []
    for term, tf in total_tf.items():
        if term in original:
            continue
        df = index.doc_frequency(term)
        if expander.method is ExpansionMethod.TERM_FREQUENCY:
            score = float(tf)
        elif expander.method is ExpansionMethod.IDF_WEIGHTED:
            score = tf * (math.log(n / df) if df > 0 else 0.0)
        else:
            score = _robertson_selection_value(doc_count[term], big_r, df, n)
        scored.append((term, score))

    scored.sort(key=lambda item: (-item[1], item[0]))
    return [term for term, _ in scored[: expander.max_expansion_terms]]


def expand_query_simple(
    original_query: Query,
    expansion_terms: Sequence[str],
    expansion_weight: float,
) -> list[tuple[str, float]]:
    """Original terms keep their weight (1.0 for plain terms); new terms get `expansion_weight`."""
    expanded = weighted_terms(original_query)
    expanded.extend((term, expansion_weight) for term in expansion_terms)
    return expanded


def expand_query_with_prf(
    index: InvertedIndex,
    query: Query,
    initial_k: int,
    final_k: int,
    expander: QueryExpander,
    retrieve_fn: RetrieveFn,
) -> list[ScoredDoc]:
    """
    Two-pass retrieval with feedback expansion.

    Errors raised by `retrieve_fn` (empty query, empty index) propagate.
    """

    initial_results = retrieve_fn(index, query, initial_k)
    if not initial_results:
        return []

    feedback_ids = [doc_id for doc_id, _ in initial_results[: expander.prf_depth]]
    expansion_terms = select_expansion_terms(index, feedback_ids, query, expander)
    if not expansion_terms:
        return initial_results[:final_k]

    expanded = expand_query_simple(query, expansion_terms, expander.expansion_weight)
    logger.debug(
        "Expanded query with feedback terms",
        extra={
            "feedback_docs": len(feedback_ids),
            "expansion_terms": expansion_terms,
            "method": expander.method.value,
        },
    )
    return retrieve_fn(index, expanded, final_k)
