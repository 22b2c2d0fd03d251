# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Graded-relevance IR metrics.

`relevance` maps doc id to an integer grade; unjudged docs and negative
grades count as 0.
"""

import math
from typing import Mapping, Sequence


def _gain(grade: float, exponential: bool) -> float:
    grade = max(grade, 0.0)
    return (2.0 ** grade - 1.0) if exponential else grade


def dcg_at_k(grades: Sequence[float], k: int, exponential: bool = True) -> float:
    """
    DCG over grades listed in rank order. Gain is 2^rel - 1 (or rel when
    `exponential` is False), discount is log2(position + 1).
    """
    if k <= 0:
        return 0.0
    return sum(
        _gain(grade, exponential) / math.log2(position + 1)
        for position, grade in enumerate(grades[:k], start=1)
    )


def compute_ndcg(
    ranked: Sequence[str],
    relevance: Mapping[str, int],
    k: int,
    exponential: bool = True,
) -> float:
    """DCG of the ranking over DCG of the ideal ordering; 0.0 when ideal DCG is 0."""
    if k <= 0:
        return 0.0
    grades = [relevance.get(doc_id, 0) for doc_id in ranked]
    ideal = sorted((g for g in relevance.values() if g > 0), reverse=True)
    idcg = dcg_at_k(ideal, k, exponential)
    if idcg <= 0:
        return 0.0
    return dcg_at_k(grades, k, exponential) / idcg


def compute_err(
    ranked: Sequence[str],
    relevance: Mapping[str, int],
    k: int,
    max_grade: int | None = None,
) -> float:
    """
    Expected Reciprocal Rank (Chapelle et al., 2009).

    Each position stops the user with probability (2^g - 1) / 2^max_grade.
    `max_grade` defaults to the highest grade in `relevance`.
    """
    if k <= 0 or not relevance:
        return 0.0
    if max_grade is None:
        max_grade = max(relevance.values())
    if max_grade <= 0:
        return 0.0

    denominator = 2.0 ** max_grade
    err = 0.0
    p_continue = 1.0
    for position, doc_id in enumerate(ranked[:k], start=1):
        grade = min(max(relevance.get(doc_id, 0), 0), max_grade)
        stop = (2.0 ** grade - 1.0) / denominator
        err += p_continue * stop / position
        p_continue *= 1.0 - stop
    return err
