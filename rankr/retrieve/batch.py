# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Run many queries through one retriever."""

from typing import Callable, Sequence

from rankr.retrieve.index import Query, ScoredDoc

QueryRetrieveFn = Callable[[Query, int], list[ScoredDoc]]


def batch_retrieve(
    retrieve_fn: QueryRetrieveFn,
    queries: Sequence[Query],
    k: int,
) -> list[list[ScoredDoc]]:
    """
    Results come back in query order. The first failing query aborts the
    batch and its exception propagates unchanged.
    """
    return [retrieve_fn(query, k) for query in queries]
