# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Query-likelihood retrieval with smoothed unigram document models.

Documents are ranked by log P(Q | D) = sum over query terms of ln p(t | D),
where p(t | D) mixes the document model with the collection model:

  Jelinek-Mercer:  p = lambda * tf/|D| + (1 - lambda) * cf/|C|
  Dirichlet:       p = (tf + mu * cf/|C|) / (|D| + mu)

Terms whose smoothed probability is 0 (unseen in the whole collection) are
skipped rather than sending the score to -inf.
"""

import math
from dataclasses import dataclass
from enum import Enum

from rankr.config.schema import QueryLikelihoodConfig
from rankr.retrieve.errors import EmptyIndexError, EmptyQueryError
from rankr.retrieve.index import InvertedIndex, Query, ScoredDoc, top_k, weighted_terms

DEFAULT_JM_LAMBDA = 0.5
DEFAULT_DIRICHLET_MU = 1000.0


class SmoothingKind(Enum):
    JELINEK_MERCER = "jelinek_mercer"
    DIRICHLET = "dirichlet"


@dataclass(frozen=True)
class SmoothingMethod:
    """
    A smoothing kind and its single parameter. Use the constructors below;
    they clamp lambda into [0, 1] and mu to >= 0.
    """

    kind: SmoothingKind
    value: float

    @classmethod
    def jelinek_mercer(cls, lam: float = DEFAULT_JM_LAMBDA) -> "SmoothingMethod":
        return cls(SmoothingKind.JELINEK_MERCER, min(max(lam, 0.0), 1.0))

    @classmethod
    def dirichlet(cls, mu: float = DEFAULT_DIRICHLET_MU) -> "SmoothingMethod":
        return cls(SmoothingKind.DIRICHLET, max(mu, 0.0))


@dataclass(frozen=True)
class QueryLikelihoodParams:
    smoothing: SmoothingMethod = SmoothingMethod.dirichlet()

    @classmethod
    def from_config(cls, config: QueryLikelihoodConfig) -> "QueryLikelihoodParams":
        if config.smoothing == "jelinek_mercer":
            return cls(SmoothingMethod.jelinek_mercer(config.jm_lambda))
        return cls(SmoothingMethod.dirichlet(config.mu))


def _term_probability(
    index: InvertedIndex,
    doc_id: str,
    term: str,
    smoothing: SmoothingMethod,
) -> float:
    collection_size = index.collection_size
    p_corpus = index.collection_frequency(term) / collection_size if collection_size else 0.0
    doc_length = index.document_length(doc_id)
    tf = index.term_frequency(doc_id, term)

    if smoothing.kind is SmoothingKind.JELINEK_MERCER:
        lam = smoothing.value
        p_doc = tf / doc_length if doc_length else 0.0
        return lam * p_doc + (1.0 - lam) * p_corpus

    mu = smoothing.value
    denominator = doc_length + mu
    if denominator == 0:
        return 0.0
    return (tf + mu * p_corpus) / denominator


def score_query_likelihood(
    index: InvertedIndex,
    doc_id: str,
    query_terms: Query,
    params: QueryLikelihoodParams | None = None,
) -> float:
    params = params or QueryLikelihoodParams()
    log_score = 0.0
    for term, weight in weighted_terms(query_terms):
        p = _term_probability(index, doc_id, term, params.smoothing)
        if p > 0.0:
            log_score += weight * math.log(p)
    return log_score


def retrieve_query_likelihood(
    index: InvertedIndex,
    query_terms: Query,
    k: int,
    params: QueryLikelihoodParams | None = None,
) -> list[ScoredDoc]:
    """
    Rank documents by smoothed query likelihood. Candidates are documents
    matching any query term; when nothing matches, every document is scored
    so the collection model still produces a ranking.

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

    params = params or QueryLikelihoodParams()
    terms = [term for term, _ in weighted_terms(query_terms)]
    candidates = index.candidates(terms) or index.document_ids()
    scores = {
        doc_id: score_query_likelihood(index, doc_id, query_terms, params)
        for doc_id in candidates
    }
    return top_k(scores, k)
