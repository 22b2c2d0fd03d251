# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Rank fusion algorithms.

Every fuser takes ranked lists of (doc_id, score), best first, and returns a
single list sorted by fused score descending with ties broken by doc id
ascending. Ranks are 1-based. When a document appears more than once in the
same list, only its best (first) position counts.

Rank-based:
  - RRF:   sum of 1 / (k + rank), k = 60 by default
  - ISR:   sum of 1 / sqrt(k + rank), k = 1 by default
  - Borda: each list awards n - rank + 1 points, n being that list's length

Score-based:
  - CombSUM:  sum of min-max normalized scores
  - CombMNZ:  CombSUM times the number of lists containing the document
  - DBSF:     sum of clipped z-scores
  - weighted: weighted sum of (optionally min-max normalized) scores
"""

import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from rankr.config.schema import FusionConfig
from rankr.fusion.errors import FusionError
from rankr.fusion.normalize import min_max, z_score

Ranked = Sequence[tuple[str, float]]
Fused = list[tuple[str, float]]

DEFAULT_RRF_K = 60.0
DEFAULT_ISR_K = 1.0


@dataclass(frozen=True)
class RrfConfig:
    k: float = DEFAULT_RRF_K
    top_k: Optional[int] = None

    def __post_init__(self) -> None:
        if self.k <= 0:
            raise FusionError(f"RRF k must be > 0, got {self.k}")


@dataclass(frozen=True)
class IsrConfig:
    k: float = DEFAULT_ISR_K
    top_k: Optional[int] = None

    def __post_init__(self) -> None:
        if self.k <= 0:
            raise FusionError(f"ISR k must be > 0, got {self.k}")


@dataclass(frozen=True)
class CombConfig:
    """Settings for the parameter-free fusers (CombSUM, CombMNZ, Borda, DBSF)."""

    top_k: Optional[int] = None


def _dedupe(results: Ranked) -> list[tuple[str, float]]:
    seen: set[str] = set()
    unique: list[tuple[str, float]] = []
    for doc_id, score in results:
        if doc_id in seen:
            continue
        seen.add(doc_id)
        unique.append((doc_id, score))
    return unique


def _finish(totals: dict[str, float], top_k: Optional[int]) -> Fused:
    fused = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    if top_k is not None:
        fused = fused[:top_k]
    return fused


def _rank_fusion(
    lists: Sequence[Ranked],
    contribution: Callable[[int, int], float],
    top_k: Optional[int],
) -> Fused:
    """`contribution(rank, list_length)` gives the points for one appearance."""
    totals: dict[str, float] = {}
    for results in lists:
        unique = _dedupe(results)
        for rank, (doc_id, _) in enumerate(unique, start=1):
            totals[doc_id] = totals.get(doc_id, 0.0) + contribution(rank, len(unique))
    return _finish(totals, top_k)


def rrf_multi(lists: Sequence[Ranked], config: RrfConfig | None = None) -> Fused:
    config = config or RrfConfig()
    return _rank_fusion(lists, lambda rank, _n: 1.0 / (config.k + rank), config.top_k)


def rrf(a: Ranked, b: Ranked, config: RrfConfig | None = None) -> Fused:
    return rrf_multi([a, b], config)


def isr_multi(lists: Sequence[Ranked], config: IsrConfig | None = None) -> Fused:
    config = config or IsrConfig()
    return _rank_fusion(lists, lambda rank, _n: 1.0 / math.sqrt(config.k + rank), config.top_k)


def isr(a: Ranked, b: Ranked, config: IsrConfig | None = None) -> Fused:
    return isr_multi([a, b], config)


def borda_multi(lists: Sequence[Ranked], config: CombConfig | None = None) -> Fused:
    config = config or CombConfig()
    return _rank_fusion(lists, lambda rank, n: float(n - rank + 1), config.top_k)


def borda(a: Ranked, b: Ranked, config: CombConfig | None = None) -> Fused:
    return borda_multi([a, b], config)


def _score_fusion(
    normalized_lists: Sequence[Sequence[tuple[str, float]]],
    weights: Sequence[float],
    multiply_by_hits: bool,
    top_k: Optional[int],
) -> Fused:
    totals: dict[str, float] = {}
    hits: dict[str, int] = {}
    for results, weight in zip(normalized_lists, weights):
        for doc_id, score in results:
            totals[doc_id] = totals.get(doc_id, 0.0) + weight * score
            hits[doc_id] = hits.get(doc_id, 0) + 1
    if multiply_by_hits:
        totals = {doc_id: total * hits[doc_id] for doc_id, total in totals.items()}
    return _finish(totals, top_k)


def combsum_multi(lists: Sequence[Ranked], config: CombConfig | None = None) -> Fused:
    config = config or CombConfig()
    normalized = [min_max(_dedupe(results)) for results in lists]
    return _score_fusion(normalized, [1.0] * len(lists), False, config.top_k)


def combsum(a: Ranked, b: Ranked, config: CombConfig | None = None) -> Fused:
    return combsum_multi([a, b], config)


def combmnz_multi(lists: Sequence[Ranked], config: CombConfig | None = None) -> Fused:
    config = config or CombConfig()
    normalized = [min_max(_dedupe(results)) for results in lists]
    return _score_fusion(normalized, [1.0] * len(lists), True, config.top_k)


def combmnz(a: Ranked, b: Ranked, config: CombConfig | None = None) -> Fused:
    return combmnz_multi([a, b], config)


def dbsf_multi(lists: Sequence[Ranked], config: CombConfig | None = None) -> Fused:
    config = config or CombConfig()
    normalized = [z_score(_dedupe(results)) for results in lists]
    return _score_fusion(normalized, [1.0] * len(lists), False, config.top_k)


def dbsf(a: Ranked, b: Ranked, config: CombConfig | None = None) -> Fused:
    return dbsf_multi([a, b], config)


def weighted(
    lists: Sequence[Ranked],
    weights: Sequence[float],
    normalize: bool = True,
    top_k: Optional[int] = None,
) -> Fused:
    """
    Raises:
        FusionError: If the weights do not match the number of lists, any
            weight is negative, or every weight is zero.
    """
    if len(weights) != len(lists):
        raise FusionError(
            f"Got {len(weights)} weights for {len(lists)} ranked lists"
        )
    if any(w < 0 for w in weights):
        raise FusionError("Fusion weights must be non-negative")
    if lists and not any(w > 0 for w in weights):
        raise FusionError("At least one fusion weight must be positive")

    prepared = [
        min_max(_dedupe(results)) if normalize else _dedupe(results)
        for results in lists
    ]
    return _score_fusion(prepared, weights, False, top_k)


FUSION_METHODS = ("rrf", "isr", "combsum", "combmnz", "borda", "dbsf", "weighted")


def fuse(method: str, lists: Sequence[Ranked], config: FusionConfig | None = None) -> Fused:
    """
    Dispatch by method name, taking parameters from a `fusion:` config section.

    With no config the method runs with its defaults (weighted fusion then
    falls back to equal weights).

    Raises:
        FusionError: For an unknown method or invalid parameters.
    """
    if method not in FUSION_METHODS:
        raise FusionError(f"Unknown fusion method {method!r}; expected one of {', '.join(FUSION_METHODS)}")
    if not lists:
        return []

    top_k = config.top_k if config is not None else None

    if method == "rrf":
        k = config.rrf_k if config is not None else DEFAULT_RRF_K
        return rrf_multi(lists, RrfConfig(k=k, top_k=top_k))
    if method == "isr":
        k = config.isr_k if config is not None else DEFAULT_ISR_K
        return isr_multi(lists, IsrConfig(k=k, top_k=top_k))
    if method == "combsum":
        return combsum_multi(lists, CombConfig(top_k=top_k))
    if method == "combmnz":
        return combmnz_multi(lists, CombConfig(top_k=top_k))
    if method == "borda":
        return borda_multi(lists, CombConfig(top_k=top_k))
    if method == "dbsf":
        return dbsf_multi(lists, CombConfig(top_k=top_k))

    weights = config.weights if config is not None and config.weights is not None else [1.0] * len(lists)
    normalize = config.normalize if config is not None else True
    return weighted(lists, weights, normalize=normalize, top_k=top_k)
