# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Retrieve -> fuse -> filter composition.

A Pipeline owns an Analyzer, one or more named retrievers, an optional
fusion method, an optional metadata filter and an optional router:

    pipeline = (
        Pipeline.builder(analyzer)
        .retrieve("tfidf", tfidf_fn)
        .retrieve("query_likelihood", ql_fn)
        .fuse("rrf")
        .build()
    )
    results = pipeline.search("neural ranking models", k=10)

A retriever is any callable `(terms, k) -> [(doc_id, score), ...]`. When a
router is attached, only the retrievers it picks for the query run; router
picks with no registered retriever are ignored, and if none remain every
retriever runs.
"""

from typing import Callable, Mapping, Optional, Sequence

from rankr.config.exceptions import ConfigValidationError
from rankr.config.schema import FusionConfig, RetrievalConfig
from rankr.fusion.errors import FusionError
from rankr.fusion.methods import FUSION_METHODS, fuse
from rankr.eval.trec import TrecRun
from rankr.logging.logger import get_logger
from rankr.retrieve.analysis import Analyzer
from rankr.retrieve.errors import EmptyQueryError
from rankr.retrieve.expansion import QueryExpander, expand_query_with_prf
from rankr.retrieve.filtering import FilterPredicate, MetadataStore, filter_results
from rankr.retrieve.index import InvertedIndex, Query, ScoredDoc
from rankr.retrieve.query_likelihood import QueryLikelihoodParams, retrieve_query_likelihood
from rankr.retrieve.routing import QueryFeatures, QueryRouter, RetrieverId
from rankr.retrieve.tfidf import TfIdfParams, retrieve_tfidf

logger = get_logger(__name__)

RetrieverFn = Callable[[list[str], int], list[ScoredDoc]]


class PipelineError(Exception):
    """The pipeline was assembled incorrectly."""


class Pipeline:
    def __init__(
        self,
        analyzer: Analyzer,
        retrievers: Mapping[str, RetrieverFn],
        fusion_method: str = "rrf",
        fusion_config: FusionConfig | None = None,
        metadata_store: MetadataStore | None = None,
        predicate: FilterPredicate | None = None,
        router: QueryRouter | None = None,
        depth: int | None = None,
    ) -> None:
        if not retrievers:
            raise PipelineError("A pipeline needs at least one retriever")
        self.analyzer = analyzer
        self.retrievers = dict(retrievers)
        self.fusion_method = fusion_method
        self.fusion_config = fusion_config
        self.metadata_store = metadata_store
        self.predicate = predicate
        self.router = router
        self.depth = depth
        self._check_fusion_weights()

    def _check_fusion_weights(self) -> None:
        """Weighted fusion carries one weight per registered retriever, in registration order."""
        weights = self.fusion_config.weights if self.fusion_config is not None else None
        if self.fusion_method != "weighted" or weights is None:
            return
        if len(weights) != len(self.retrievers):
            raise PipelineError(
                f"Got {len(weights)} fusion weights for {len(self.retrievers)} retrievers "
                f"({', '.join(self.retrievers)})"
            )
        if self.router is not None and any(w <= 0 for w in weights):
            # Any routed subset may be fused, so each retriever needs a positive weight.
            raise PipelineError("Routed weighted fusion needs a positive weight for every retriever")

    def _fuse(self, names: Sequence[str], lists: list[list[ScoredDoc]]) -> list[ScoredDoc]:
        config = self.fusion_config
        if self.fusion_method == "weighted" and config is not None and config.weights is not None:
            by_name = dict(zip(self.retrievers, config.weights))
            config = config.model_copy(update={"weights": [by_name[name] for name in names]})
        return fuse(self.fusion_method, lists, config)

    @staticmethod
    def builder(analyzer: Analyzer | None = None) -> "PipelineBuilder":
        return PipelineBuilder(analyzer or Analyzer())

    def select_retrievers(self, terms: Sequence[str]) -> list[str]:
        if self.router is None:
            return list(self.retrievers)

        routed = self.router.route(QueryFeatures.from_terms(terms))
        if routed == [RetrieverId.NO_RETRIEVAL]:
            return []
        names = [rid.value for rid in routed if rid.value in self.retrievers]
        if not names:
            logger.debug("Router picked no registered retriever, running all", extra={"routed": [r.value for r in routed]})
            return list(self.retrievers)
        return names

    def search(
        self,
        query_text: str,
        k: int,
        predicate: FilterPredicate | None = None,
    ) -> list[ScoredDoc]:
        """
        Analyze, retrieve, fuse (when more than one list), filter, truncate.

        `predicate` overrides the pipeline's own filter for this call.

        Raises:
            EmptyQueryError: If the query has no terms after analysis.
        """
        terms = self.analyzer.analyze(query_text)
        if not terms:
            raise EmptyQueryError()
        if k <= 0:
            return []

        depth = max(k, self.depth or 0)
        names = self.select_retrievers(terms)
        lists = [self.retrievers[name](terms, depth) for name in names]

        if not lists:
            results: list[ScoredDoc] = []
        elif len(lists) == 1:
            results = list(lists[0])
        else:
            results = self._fuse(names, lists)

        active = predicate or self.predicate
        if active is not None:
            if self.metadata_store is None:
                raise PipelineError("A filter was given but the pipeline has no metadata store")
            results = filter_results(results, self.metadata_store, active)

        return results[:k]

    def run(self, topics: Mapping[str, str], k: int, tag: str = "rankr") -> TrecRun:
        """
        Search every topic and collect a TREC run. Topics that analyze to
        nothing get an empty result list and a warning instead of aborting
        the run.
        """
        run = TrecRun(tag=tag)
        for query_id in sorted(topics):
            try:
                run.add_query(query_id, self.search(topics[query_id], k))
            except EmptyQueryError:
                logger.warning("Topic has no searchable terms", extra={"query_id": query_id})
                run.add_query(query_id, [])
        return run


class PipelineBuilder:
    def __init__(self, analyzer: Analyzer) -> None:
        self._analyzer = analyzer
        self._retrievers: dict[str, RetrieverFn] = {}
        self._fusion_method = "rrf"
        self._fusion_config: FusionConfig | None = None
        self._store: MetadataStore | None = None
        self._predicate: FilterPredicate | None = None
        self._router: QueryRouter | None = None
        self._depth: int | None = None

    def retrieve(self, name: str, fn: RetrieverFn) -> "PipelineBuilder":
        if name in self._retrievers:
            raise PipelineError(f"Retriever {name!r} registered twice")
        self._retrievers[name] = fn
        return self

    def fuse(self, method: str, config: FusionConfig | None = None) -> "PipelineBuilder":
        if method not in FUSION_METHODS:
            raise FusionError(f"Unknown fusion method {method!r}")
        self._fusion_method = method
        self._fusion_config = config
        return self

    def filter(self, store: MetadataStore, predicate: FilterPredicate | None = None) -> "PipelineBuilder":
        self._store = store
        self._predicate = predicate
        return self

    def route(self, router: QueryRouter) -> "PipelineBuilder":
        self._router = router
        return self

    def depth(self, depth: int) -> "PipelineBuilder":
        self._depth = depth
        return self

    def build(self) -> Pipeline:
        return Pipeline(
            analyzer=self._analyzer,
            retrievers=self._retrievers,
            fusion_method=self._fusion_method,
            fusion_config=self._fusion_config,
            metadata_store=self._store,
            predicate=self._predicate,
            router=self._router,
            depth=self._depth,
        )


def _with_feedback(
    index: InvertedIndex,
    base: Callable[[InvertedIndex, Query, int], list[ScoredDoc]],
    expander: QueryExpander,
    initial_k: int,
) -> RetrieverFn:
    def search(terms: list[str], k: int) -> list[ScoredDoc]:
        return expand_query_with_prf(
            index, terms, max(initial_k, expander.prf_depth), k, expander, base
        )

    return search


def build_pipeline(
    index: InvertedIndex,
    analyzer: Analyzer,
    retrieval_config: RetrievalConfig,
    fusion_config: Optional[FusionConfig] = None,
    metadata_store: MetadataStore | None = None,
) -> Pipeline:
    """
    Assemble a pipeline from the `retrieval:` and `fusion:` config sections.

    Every listed method becomes a retriever (wrapped in feedback expansion
    when `expansion.enabled`). With `routing` on, TF-IDF, query likelihood
    and PRF are all registered and a router picks among them per query.
    Weighted fusion weights follow that registration order and are looked
    up by retriever name for whichever subset a query runs.

    Raises:
        ConfigValidationError: If the fusion weights do not fit the
            registered retrievers.
    """
    tfidf_params = TfIdfParams.from_config(retrieval_config.tfidf)
    ql_params = QueryLikelihoodParams.from_config(retrieval_config.query_likelihood)
    expander = QueryExpander.from_config(retrieval_config.expansion)
    initial_k = retrieval_config.expansion.initial_k

    def tfidf(idx: InvertedIndex, query: Query, k: int) -> list[ScoredDoc]:
        return retrieve_tfidf(idx, query, k, tfidf_params)

    def query_likelihood(idx: InvertedIndex, query: Query, k: int) -> list[ScoredDoc]:
        return retrieve_query_likelihood(idx, query, k, ql_params)

    bases = {"tfidf": tfidf, "query_likelihood": query_likelihood}

    builder = Pipeline.builder(analyzer).depth(retrieval_config.k)
    names = list(bases) if retrieval_config.routing else list(dict.fromkeys(retrieval_config.methods))
    for name in names:
        base = bases[name]
        if retrieval_config.expansion.enabled:
            builder.retrieve(name, _with_feedback(index, base, expander, initial_k))
        else:
            builder.retrieve(name, lambda terms, k, base=base: base(index, terms, k))

    if retrieval_config.routing:
        builder.retrieve(RetrieverId.PRF.value, _with_feedback(index, tfidf, expander, initial_k))
        default = RetrieverId(retrieval_config.methods[0])
        builder.route(QueryRouter(default_retriever=default).with_routing())

    if fusion_config is not None:
        builder.fuse(fusion_config.method, fusion_config)

    if metadata_store is not None:
        builder.filter(metadata_store)

    try:
        return builder.build()
    except PipelineError as err:
        raise ConfigValidationError(f"fusion: {err}") from err
