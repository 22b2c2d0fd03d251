# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Synthetic benchmark datasets.

Documents are bags of term ids drawn from a Zipf distribution over the
vocabulary, which gives the long-tailed document frequencies real text has.
Each query is sampled from one source document, so that document is a
known-relevant answer. Everything is driven by a seeded `random.Random`, so
the same seed always yields the same corpus and queries.
"""

import itertools
import random
from dataclasses import dataclass, field
from enum import Enum

ZIPF_EXPONENT = 1.0


def term_name(term_id: int) -> str:
    return f"t{term_id}"


def doc_name(index: int) -> str:
    return f"d{index}"


def generate_synthetic_corpus(
    num_docs: int,
    vocab_size: int,
    doc_length: int,
    seed: int,
) -> list[list[str]]:
    """`num_docs` documents of exactly `doc_length` Zipf-sampled terms."""
    if vocab_size < 1:
        raise ValueError(f"vocab_size must be >= 1, got {vocab_size}")
    rng = random.Random(seed)
    vocabulary = [term_name(i) for i in range(vocab_size)]
    cum_weights = list(
        itertools.accumulate(1.0 / (rank ** ZIPF_EXPONENT) for rank in range(1, vocab_size + 1))
    )
    return [
        rng.choices(vocabulary, cum_weights=cum_weights, k=doc_length)
        for _ in range(num_docs)
    ]


@dataclass(frozen=True)
class SyntheticQuery:
    query_id: str
    terms: list[str]
    source_doc: str


def generate_queries(
    corpus: list[list[str]],
    num_queries: int,
    query_length: int,
    seed: int,
) -> list[SyntheticQuery]:
    """
    Sample each query's terms from one random non-empty document. Distinct
    terms are preferred; short documents give shorter queries.
    """
    candidates = [i for i, doc in enumerate(corpus) if doc]
    if not candidates:
        return []
    rng = random.Random(seed)
    queries: list[SyntheticQuery] = []
    for q in range(num_queries):
        source = rng.choice(candidates)
        distinct = sorted(set(corpus[source]))
        terms = rng.sample(distinct, min(query_length, len(distinct)))
        queries.append(SyntheticQuery(query_id=f"q{q}", terms=terms, source_doc=doc_name(source)))
    return queries


@dataclass
class BenchmarkDataset:
    name: str
    documents: list[tuple[str, list[str]]] = field(default_factory=list)
    queries: list[SyntheticQuery] = field(default_factory=list)

    @property
    def num_docs(self) -> int:
        return len(self.documents)


def create_benchmark_dataset(
    name: str,
    num_docs: int,
    num_queries: int,
    vocab_size: int,
    doc_length: int,
    query_length: int,
    seed: int,
) -> BenchmarkDataset:
    corpus = generate_synthetic_corpus(num_docs, vocab_size, doc_length, seed)
    # Offset so queries are not drawn from the corpus generator's stream.
    queries = generate_queries(corpus, num_queries, query_length, seed + 1)
    return BenchmarkDataset(
        name=name,
        documents=[(doc_name(i), terms) for i, terms in enumerate(corpus)],
        queries=queries,
    )


@dataclass(frozen=True)
class DatasetShape:
    num_docs: int
    num_queries: int
    vocab_size: int
    doc_length: int
    query_length: int


class StandardDataset(Enum):
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"

    @property
    def shape(self) -> DatasetShape:
        return _SHAPES[self]

    def generate(self, seed: int = 42) -> BenchmarkDataset:
        s = self.shape
        return create_benchmark_dataset(
            name=self.value,
            num_docs=s.num_docs,
            num_queries=s.num_queries,
            vocab_size=s.vocab_size,
            doc_length=s.doc_length,
            query_length=s.query_length,
            seed=seed,
        )


_SHAPES: dict[StandardDataset, DatasetShape] = {
    StandardDataset.TINY: DatasetShape(200, 20, 500, 40, 3),
    StandardDataset.SMALL: DatasetShape(2_000, 100, 5_000, 80, 4),
    StandardDataset.MEDIUM: DatasetShape(20_000, 500, 20_000, 120, 5),
}
