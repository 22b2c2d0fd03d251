# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Metadata filtering for retrieval results.

Documents may carry categorical metadata: a mapping of field name to an
integer category id (e.g. {"language": 2, "year_bucket": 5}). Filters are
small predicate trees built from Equals, And and Or. The store answers
"does this doc match", selectivity estimates and facet counts, and
`filter_results` post-filters any ranked list.

The augment_* helpers encode a category as a weighted one-hot suffix on a
feature vector, which lets a vector scorer prefer one category without a
hard filter.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from rankr.retrieve.errors import InvalidParameterError

DocumentMetadata = Mapping[str, int]


@dataclass(frozen=True)
class Equals:
    field: str
    value: int

    def matches(self, metadata: DocumentMetadata) -> bool:
        return metadata.get(self.field) == self.value


@dataclass(frozen=True)
class And:
    predicates: Sequence["FilterPredicate"] = field(default_factory=tuple)

    def matches(self, metadata: DocumentMetadata) -> bool:
        return all(p.matches(metadata) for p in self.predicates)


@dataclass(frozen=True)
class Or:
    predicates: Sequence["FilterPredicate"] = field(default_factory=tuple)

    def matches(self, metadata: DocumentMetadata) -> bool:
        return any(p.matches(metadata) for p in self.predicates)


FilterPredicate = Union[Equals, And, Or]


def filter_from_dict(data: Any) -> FilterPredicate:
    """
    Build a predicate from its JSON form, as accepted by the search server:

      {"field": "lang", "value": 2}
      {"and": [<predicate>, ...]}
      {"or": [<predicate>, ...]}

    Raises:
        InvalidParameterError: If the structure is not one of the above.
    """
    if not isinstance(data, dict):
        raise InvalidParameterError(f"Filter must be an object, got {type(data).__name__}")
    if "and" in data:
        return And(tuple(filter_from_dict(item) for item in data["and"]))
    if "or" in data:
        return Or(tuple(filter_from_dict(item) for item in data["or"]))
    if "field" in data and "value" in data:
        try:
            return Equals(str(data["field"]), int(data["value"]))
        except (TypeError, ValueError) as err:
            raise InvalidParameterError(f"Filter value must be an integer: {data['value']!r}") from err
    raise InvalidParameterError(f"Unrecognized filter: {data!r}")


def parse_filter_expression(expression: str) -> FilterPredicate:
    """
    Parse the CLI shorthand `field=value[,field=value...]` into an And of Equals.

    Raises:
        InvalidParameterError: On a clause without `=` or a non-integer value.
    """
    clauses: list[FilterPredicate] = []
    for clause in expression.split(","):
        clause = clause.strip()
        if not clause:
            continue
        name, sep, raw_value = clause.partition("=")
        if not sep or not name.strip():
            raise InvalidParameterError(f"Filter clause must look like field=value: {clause!r}")
        try:
            clauses.append(Equals(name.strip(), int(raw_value)))
        except ValueError as err:
            raise InvalidParameterError(f"Filter value must be an integer: {raw_value!r}") from err
    if len(clauses) == 1:
        return clauses[0]
    return And(tuple(clauses))


class MetadataStore:
    def __init__(self) -> None:
        self._metadata: dict[str, dict[str, int]] = {}

    def __len__(self) -> int:
        return len(self._metadata)

    def add(self, doc_id: str, metadata: DocumentMetadata) -> None:
        self._metadata[doc_id] = dict(metadata)

    def get(self, doc_id: str) -> dict[str, int] | None:
        return self._metadata.get(doc_id)

    def matches(self, doc_id: str, predicate: FilterPredicate) -> bool:
        """Unknown documents never match."""
        metadata = self._metadata.get(doc_id)
        return metadata is not None and predicate.matches(metadata)

    def estimate_selectivity(self, predicate: FilterPredicate) -> float | None:
        """Fraction of stored documents the predicate keeps; None for an empty store."""
        if not self._metadata:
            return None
        matching = sum(1 for metadata in self._metadata.values() if predicate.matches(metadata))
        return matching / len(self._metadata)

    def get_all_values(self, field_name: str) -> list[int]:
        return sorted({m[field_name] for m in self._metadata.values() if field_name in m})

    def get_value_counts(self, field_name: str) -> list[tuple[int, int]]:
        return self._count_values(field_name, predicate=None)

    def get_value_counts_filtered(
        self, field_name: str, predicate: FilterPredicate
    ) -> list[tuple[int, int]]:
        return self._count_values(field_name, predicate=predicate)

    def _count_values(
        self, field_name: str, predicate: FilterPredicate | None
    ) -> list[tuple[int, int]]:
        counts: dict[int, int] = {}
        for metadata in self._metadata.values():
            if predicate is not None and not predicate.matches(metadata):
                continue
            if field_name in metadata:
                value = metadata[field_name]
                counts[value] = counts.get(value, 0) + 1
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {doc_id: dict(m) for doc_id, m in self._metadata.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, int]]) -> "MetadataStore":
        store = cls()
        for doc_id, metadata in data.items():
            store.add(doc_id, metadata)
        return store


def filter_results(
    results: Sequence[tuple[str, float]],
    store: MetadataStore,
    predicate: FilterPredicate,
) -> list[tuple[str, float]]:
    """Keep matching documents, preserving rank order."""
    return [(doc_id, score) for doc_id, score in results if store.matches(doc_id, predicate)]


def augment_embedding(
    embedding: Sequence[float],
    category_id: int,
    num_categories: int,
    weight: float,
) -> list[float]:
    """
    Append a one-hot category block scaled by `weight`.

    Raises:
        InvalidParameterError: If `category_id` is outside [0, num_categories).
    """
    if category_id < 0 or category_id >= num_categories:
        raise InvalidParameterError(
            f"Category ID {category_id} >= num_categories {num_categories}"
        )
    one_hot = [0.0] * num_categories
    one_hot[category_id] = weight
    return list(embedding) + one_hot


def augment_query(
    query: Sequence[float],
    desired_category: int,
    num_categories: int,
    weight: float,
) -> list[float]:
    return augment_embedding(query, desired_category, num_categories, weight)


def extract_original(augmented: Sequence[float], original_dim: int) -> list[float]:
    return list(augmented[:original_dim])
