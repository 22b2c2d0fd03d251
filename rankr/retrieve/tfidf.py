# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
TF-IDF scoring over the inverted index.

score(d, q) = sum over query terms t of  w(t) * tf(t, d) * idf(t)

where w(t) is the query weight of the term (1.0 for plain queries, lower for
feedback expansion terms).
"""

import math
from dataclasses import dataclass
from enum import Enum

from rankr.config.schema import TfIdfConfig
from rankr.retrieve.errors import EmptyIndexError, EmptyQueryError
from rankr.retrieve.index import InvertedIndex, Query, ScoredDoc, top_k, weighted_terms


class TfVariant(Enum):
    LINEAR = "linear"
    LOG_SCALED = "log_scaled"


class IdfVariant(Enum):
    STANDARD = "standard"
    SMOOTHED = "smoothed"


@dataclass(frozen=True)
class TfIdfParams:
    tf_variant: TfVariant = TfVariant.LOG_SCALED
    idf_variant: IdfVariant = IdfVariant.STANDARD

    @classmethod
    def linear(cls) -> "TfIdfParams":
        return cls(tf_variant=TfVariant.LINEAR, idf_variant=IdfVariant.STANDARD)

    @classmethod
    def smoothed(cls) -> "TfIdfParams":
        return cls(tf_variant=TfVariant.LOG_SCALED, idf_variant=IdfVariant.SMOOTHED)

    @classmethod
    def from_config(cls, config: TfIdfConfig) -> "TfIdfParams":
        return cls(
            tf_variant=TfVariant(config.tf_variant),
            idf_variant=IdfVariant(config.idf_variant),
        )


def compute_tf(tf_count: int, variant: TfVariant) -> float:
    if variant is TfVariant.LINEAR:
        return float(tf_count)
    if tf_count == 0:
        return 0.0
    return 1.0 + math.log(tf_count)


def compute_idf(num_docs: int, doc_frequency: int, variant: IdfVariant) -> float:
    """
    STANDARD is ln(N / df) and reaches 0 for a term in every document.
    SMOOTHED is ln(1 + (N - df + 0.5) / (df + 0.5)) and stays positive.
    Unseen terms (df == 0) get 0 under both.
    """
    if doc_frequency == 0:
        return 0.0
    n = float(num_docs)
    df = float(doc_frequency)
    if variant is IdfVariant.STANDARD:
        return math.log(n / df)
    return math.log(1.0 + (n - df + 0.5) / (df + 0.5))


def score_tfidf(
    index: InvertedIndex,
    doc_id: str,
    query_terms: Query,
    params: TfIdfParams | None = None,
) -> float:
    params = params or TfIdfParams()
    num_docs = index.num_docs
    score = 0.0

    for term, weight in weighted_terms(query_terms):
        tf_count = index.term_frequency(doc_id, term)
        if tf_count == 0:
            continue
        idf = compute_idf(num_docs, index.doc_frequency(term), params.idf_variant)
        if idf == 0.0:
            continue
        score += weight * compute_tf(tf_count, params.tf_variant) * idf

    return score


def retrieve_tfidf(
    index: InvertedIndex,
    query_terms: Query,
    k: int,
    params: TfIdfParams | None = None,
) -> list[ScoredDoc]:
    """
    Score every document that shares a term with the query and return the
    top k, best first, ties broken by doc id.

    Raises:
        EmptyQueryError: If the query has no terms.
        EmptyIndexError: If the index has no documents.
    """
    if not query_terms:
        raise EmptyQueryError()
    if index.num_docs == 0:
        raise EmptyIndexError()
    if k == 0:
        return []

    params = params or TfIdfParams()
    terms = [term for term, _ in weighted_terms(query_terms)]
    scores = {
        doc_id: score_tfidf(index, doc_id, query_terms, params)
        for doc_id in index.candidates(terms)
    }
    return top_k(scores, k)
