# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for metadata predicates, the metadata store and embedding augmentation."""

import pytest

from rankr.retrieve.errors import InvalidParameterError
from rankr.retrieve.filtering import (
    And,
    Equals,
    MetadataStore,
    Or,
    augment_embedding,
    augment_query,
    extract_original,
    filter_from_dict,
    filter_results,
    parse_filter_expression,
)


@pytest.fixture()
def store() -> MetadataStore:
    store = MetadataStore()
    store.add("d1", {"lang": 1, "year": 2020})
    store.add("d2", {"lang": 1, "year": 2021})
    store.add("d3", {"lang": 2, "year": 2021})
    store.add("d4", {"lang": 3})
    return store


class TestPredicates:
    def test_equals(self) -> None:
        assert Equals("lang", 1).matches({"lang": 1})
        assert not Equals("lang", 1).matches({"lang": 2})
        assert not Equals("lang", 1).matches({})

    def test_and_or(self) -> None:
        both = And((Equals("lang", 1), Equals("year", 2021)))
        either = Or((Equals("lang", 3), Equals("year", 2020)))
        assert both.matches({"lang": 1, "year": 2021})
        assert not both.matches({"lang": 1, "year": 2020})
        assert either.matches({"lang": 1, "year": 2020})

    def test_empty_and_matches_everything(self) -> None:
        assert And(()).matches({})
        assert not Or(()).matches({"lang": 1})


class TestParsing:
    def test_filter_from_dict(self) -> None:
        predicate = filter_from_dict({"or": [{"field": "lang", "value": 1}, {"and": []}]})
        assert predicate == Or((Equals("lang", 1), And(())))

    def test_filter_from_dict_rejects_garbage(self) -> None:
        with pytest.raises(InvalidParameterError):
            filter_from_dict({"nope": 1})
        with pytest.raises(InvalidParameterError):
            filter_from_dict([1, 2])
        with pytest.raises(InvalidParameterError):
            filter_from_dict({"field": "lang", "value": "english"})

    def test_expression_single_clause(self) -> None:
        assert parse_filter_expression("lang=2") == Equals("lang", 2)

    def test_expression_multiple_clauses(self) -> None:
        assert parse_filter_expression("lang=1, year=2021") == And(
            (Equals("lang", 1), Equals("year", 2021))
        )

    def test_expression_errors(self) -> None:
        with pytest.raises(InvalidParameterError):
            parse_filter_expression("lang")
        with pytest.raises(InvalidParameterError):
            parse_filter_expression("lang=en")


class TestMetadataStore:
    def test_unknown_document_never_matches(self, store: MetadataStore) -> None:
        assert not store.matches("missing", And(()))

    def test_selectivity(self, store: MetadataStore) -> None:
        assert store.estimate_selectivity(Equals("lang", 1)) == pytest.approx(0.5)
        assert MetadataStore().estimate_selectivity(Equals("lang", 1)) is None

    def test_values_and_counts(self, store: MetadataStore) -> None:
        assert store.get_all_values("lang") == [1, 2, 3]
        assert store.get_value_counts("lang") == [(1, 2), (2, 1), (3, 1)]
        assert store.get_value_counts_filtered("year", Equals("lang", 1)) == [(2020, 1), (2021, 1)]

    def test_dict_round_trip(self, store: MetadataStore) -> None:
        restored = MetadataStore.from_dict(store.to_dict())
        assert len(restored) == 4
        assert restored.get("d1") == {"lang": 1, "year": 2020}

    def test_filter_results_keeps_order(self, store: MetadataStore) -> None:
        results = [("d3", 3.0), ("d2", 2.0), ("d1", 1.0), ("d9", 0.5)]
        assert filter_results(results, store, Equals("year", 2021)) == [("d3", 3.0), ("d2", 2.0)]


class TestAugmentation:
    def test_augment_and_extract(self) -> None:
        augmented = augment_embedding([0.1, 0.2], 1, 3, 0.5)
        assert augmented == [0.1, 0.2, 0.0, 0.5, 0.0]
        assert extract_original(augmented, 2) == [0.1, 0.2]

    def test_augment_query_matches_embedding(self) -> None:
        assert augment_query([1.0], 0, 2, 1.0) == augment_embedding([1.0], 0, 2, 1.0)

    def test_category_out_of_range(self) -> None:
        with pytest.raises(InvalidParameterError):
            augment_embedding([0.1], 3, 3, 1.0)
        with pytest.raises(InvalidParameterError):
            augment_embedding([0.1], -1, 3, 1.0)
