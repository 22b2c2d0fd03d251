# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Heuristic query routing.

A router looks at cheap surface features of the analyzed query and decides
which retrievers are worth running. Disabled routers always answer with
their default retriever, so attaching one to a pipeline is a no-op until
`with_routing()` is called.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence


class QueryType(Enum):
    KEYWORD = "keyword"
    SEMANTIC = "semantic"
    HYBRID = "hybrid"
    UNKNOWN = "unknown"


class RetrieverId(Enum):
    TFIDF = "tfidf"
    QUERY_LIKELIHOOD = "query_likelihood"
    PRF = "prf"
    NO_RETRIEVAL = "no_retrieval"


@dataclass(frozen=True)
class QueryFeatures:
    length: int
    complexity: float
    query_type: QueryType
    domain: str | None = None

    @classmethod
    def from_terms(cls, terms: Sequence[str]) -> "QueryFeatures":
        """
        complexity is unique terms over total terms. Long, non-repetitive
        queries read as SEMANTIC; short, repetitive ones as KEYWORD.
        """
        if not terms:
            return cls(length=0, complexity=0.0, query_type=QueryType.UNKNOWN)

        complexity = len(set(terms)) / len(terms)
        avg_length = sum(len(t) for t in terms) / len(terms)

        if complexity > 0.8 and avg_length > 5.0:
            query_type = QueryType.SEMANTIC
        elif complexity < 0.5 and avg_length < 4.0:
            query_type = QueryType.KEYWORD
        else:
            query_type = QueryType.HYBRID

        return cls(length=len(terms), complexity=complexity, query_type=query_type)


_ROUTES: dict[QueryType, tuple[RetrieverId, ...]] = {
    QueryType.KEYWORD: (RetrieverId.TFIDF,),
    QueryType.SEMANTIC: (RetrieverId.QUERY_LIKELIHOOD, RetrieverId.PRF),
    QueryType.HYBRID: (RetrieverId.TFIDF, RetrieverId.QUERY_LIKELIHOOD),
    QueryType.UNKNOWN: (RetrieverId.TFIDF, RetrieverId.QUERY_LIKELIHOOD),
}


@dataclass(frozen=True)
class QueryRouter:
    default_retriever: RetrieverId = RetrieverId.TFIDF
    enabled: bool = False

    @classmethod
    def fixed(cls, retriever: RetrieverId) -> "QueryRouter":
        return cls(default_retriever=retriever, enabled=False)

    def with_routing(self) -> "QueryRouter":
        return replace(self, enabled=True)

    def route(self, features: QueryFeatures) -> list[RetrieverId]:
        if not self.enabled:
            return [self.default_retriever]
        return list(_ROUTES[features.query_type])

    def route_single(self, features: QueryFeatures) -> RetrieverId:
        routed = self.route(features)
        return routed[0] if routed else self.default_retriever
