# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Ranking SVM (Joachims, 2002) as per-document gradients.

For every pair (i, j) whose relevance differs by more than epsilon, the doc
that should rank higher is pushed up and the other pushed down whenever the
hinge margin is violated, i.e. score_high - score_low < 1.

Two optional weights follow the IR-SVM refinements (Cao et al., 2006):
  - query normalization: mu = 1 / (number of valid pairs), so queries with
    many judged docs do not dominate training
  - cost sensitivity: tau = 1 / ln(min(i, j) + 2), so mistakes near the top
    of the list cost more

Each violated pair contributes +C * mu * tau to the higher doc and the
negation to the lower one. The returned values are ascent directions: the
trainer feeds their negation to `backward`.
"""

import math
from dataclasses import dataclass
from typing import Sequence

from rankr.config.schema import LearnConfig
from rankr.learn.errors import EmptyInputError, LengthMismatchError


@dataclass(frozen=True)
class RankingSVMParams:
    c: float = 1.0
    query_normalization: bool = True
    cost_sensitivity: bool = True
    epsilon: float = 1e-10

    @classmethod
    def from_config(cls, config: LearnConfig) -> "RankingSVMParams":
        return cls(
            c=config.c,
            query_normalization=config.query_normalization,
            cost_sensitivity=config.cost_sensitivity,
            epsilon=config.epsilon,
        )


def pairwise_hinge_loss(score_i: float, score_j: float) -> float:
    """Loss for a pair where doc i should outrank doc j."""
    return max(0.0, 1.0 - (score_i - score_j))


def _ordered_pairs(relevance: Sequence[float], epsilon: float) -> list[tuple[int, int]]:
    """(high, low) index pairs whose relevance differs by more than epsilon."""
    pairs: list[tuple[int, int]] = []
    n = len(relevance)
    for i in range(n):
        for j in range(i + 1, n):
            diff = relevance[i] - relevance[j]
            if abs(diff) <= epsilon:
                continue
            pairs.append((i, j) if diff > 0 else (j, i))
    return pairs


def _check_inputs(scores: Sequence[float], relevance: Sequence[float]) -> None:
    if len(scores) != len(relevance):
        raise LengthMismatchError(len(scores), len(relevance))
    if not scores:
        raise EmptyInputError()


def compute_ranking_svm_gradients(
    scores: Sequence[float],
    relevance: Sequence[float],
    params: RankingSVMParams | None = None,
) -> list[float]:
    """
    Raises:
        LengthMismatchError: If scores and relevance differ in length.
        EmptyInputError: If there are no documents.
    """
    _check_inputs(scores, relevance)
    params = params or RankingSVMParams()

    pairs = _ordered_pairs(relevance, params.epsilon)
    mu = 1.0 / len(pairs) if params.query_normalization and pairs else 1.0

    gradients = [0.0] * len(scores)
    for high, low in pairs:
        if scores[high] - scores[low] >= 1.0:
            continue
        tau = 1.0 / math.log(min(high, low) + 2) if params.cost_sensitivity else 1.0
        contribution = params.c * mu * tau
        gradients[high] += contribution
        gradients[low] -= contribution
    return gradients


def mean_pairwise_loss(
    scores: Sequence[float],
    relevance: Sequence[float],
    epsilon: float = 1e-10,
) -> float:
    """Mean hinge loss over valid pairs; 0.0 when no pair qualifies."""
    _check_inputs(scores, relevance)
    pairs = _ordered_pairs(relevance, epsilon)
    if not pairs:
        return 0.0
    return sum(pairwise_hinge_loss(scores[h], scores[l]) for h, l in pairs) / len(pairs)


class RankingSVMTrainer:
    def __init__(self, params: RankingSVMParams | None = None) -> None:
        self.params = params or RankingSVMParams()

    def compute_gradients(
        self,
        scores: Sequence[float],
        relevance: Sequence[float],
    ) -> list[float]:
        return compute_ranking_svm_gradients(scores, relevance, self.params)

    def compute_loss(self, scores: Sequence[float], relevance: Sequence[float]) -> float:
        return mean_pairwise_loss(scores, relevance, self.params.epsilon)
