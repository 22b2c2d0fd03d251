# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Per-list score normalization used by the score-based fusers.

Scores from different retrievers live on different scales (TF-IDF sums are
positive and unbounded, query-likelihood scores are negative log
probabilities), so they are normalized within each list before combining.
"""

import math
from typing import Sequence

Ranked = Sequence[tuple[str, float]]

DBSF_CLIP = 3.0


def min_max(results: Ranked) -> list[tuple[str, float]]:
    """Map scores to [0, 1]. A list whose scores are all equal maps to 1.0."""
    if not results:
        return []
    scores = [score for _, score in results]
    lo, hi = min(scores), max(scores)
    spread = hi - lo
    if spread == 0:
        return [(doc_id, 1.0) for doc_id, _ in results]
    return [(doc_id, (score - lo) / spread) for doc_id, score in results]


def z_score(results: Ranked, clip: float = DBSF_CLIP) -> list[tuple[str, float]]:
    """
    Standardize with the population std and clip to [-clip, clip], i.e. to
    mean +/- clip standard deviations. Zero spread maps every score to 0.0.
    """
    if not results:
        return []
    scores = [score for _, score in results]
    mean = sum(scores) / len(scores)
    std = math.sqrt(sum((s - mean) ** 2 for s in scores) / len(scores))
    if std == 0:
        return [(doc_id, 0.0) for doc_id, _ in results]
    return [
        (doc_id, max(-clip, min(clip, (score - mean) / std)))
        for doc_id, score in results
    ]
