# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Binary-relevance IR metrics.

Every function takes the ranked doc ids (best first) and the set of relevant
doc ids. Shared conventions:
  - an empty relevant set scores 0.0
  - k == 0 scores 0.0
  - precision@k always divides by k, even when fewer than k docs were
    retrieved (missing positions count as non-relevant)
"""

import math
from typing import AbstractSet, Sequence


def precision_at_k(ranked: Sequence[str], relevant: AbstractSet[str], k: int) -> float:
    if not relevant or k <= 0:
        return 0.0
    hits = sum(1 for doc_id in ranked[:k] if doc_id in relevant)
    return hits / k


def recall_at_k(ranked: Sequence[str], relevant: AbstractSet[str], k: int) -> float:
    if not relevant or k <= 0:
        return 0.0
    hits = sum(1 for doc_id in ranked[:k] if doc_id in relevant)
    return hits / len(relevant)


def hit_rate_at_k(ranked: Sequence[str], relevant: AbstractSet[str], k: int) -> float:
    """Success@k: 1.0 when any relevant doc is in the top k."""
    if not relevant or k <= 0:
        return 0.0
    return 1.0 if any(doc_id in relevant for doc_id in ranked[:k]) else 0.0


def average_precision(ranked: Sequence[str], relevant: AbstractSet[str]) -> float:
    """Mean of precision at each relevant position, over all relevant docs."""
    if not relevant:
        return 0.0
    hits = 0
    total = 0.0
    for position, doc_id in enumerate(ranked, start=1):
        if doc_id in relevant:
            hits += 1
            total += hits / position
    return total / len(relevant)


def reciprocal_rank(
    ranked: Sequence[str],
    relevant: AbstractSet[str],
    k: int | None = None,
) -> float:
    if not relevant or (k is not None and k <= 0):
        return 0.0
    window = ranked if k is None else ranked[:k]
    for position, doc_id in enumerate(window, start=1):
        if doc_id in relevant:
            return 1.0 / position
    return 0.0


def ndcg_at_k(ranked: Sequence[str], relevant: AbstractSet[str], k: int) -> float:
    """nDCG with 0/1 gains and a log2(position + 1) discount."""
    if not relevant or k <= 0:
        return 0.0
    dcg = sum(
        1.0 / math.log2(position + 1)
        for position, doc_id in enumerate(ranked[:k], start=1)
        if doc_id in relevant
    )
    ideal_hits = min(len(relevant), k)
    idcg = sum(1.0 / math.log2(position + 1) for position in range(1, ideal_hits + 1))
    return dcg / idcg if idcg > 0 else 0.0


def r_precision(ranked: Sequence[str], relevant: AbstractSet[str]) -> float:
    """Precision at R, where R is the number of relevant docs."""
    if not relevant:
        return 0.0
    return precision_at_k(ranked, relevant, len(relevant))
