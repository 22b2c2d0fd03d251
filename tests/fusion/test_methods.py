# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the rank fusion algorithms.

Two small lists are fused throughout:

    A: d1 (3.0), d2 (2.0), d3 (1.0)
    B: d2 (0.9), d4 (0.5)

and the expected orders below were worked out by hand.
"""

import math

import pytest

from rankr.config.schema import FusionConfig
from rankr.fusion.errors import FusionError
from rankr.fusion.methods import (
    CombConfig,
    IsrConfig,
    RrfConfig,
    borda,
    combmnz,
    combsum,
    dbsf,
    fuse,
    isr,
    isr_multi,
    rrf,
    rrf_multi,
    weighted,
)
from rankr.fusion.normalize import min_max, z_score

A = [("d1", 3.0), ("d2", 2.0), ("d3", 1.0)]
B = [("d2", 0.9), ("d4", 0.5)]


def _ids(fused: list[tuple[str, float]]) -> list[str]:
    return [doc_id for doc_id, _ in fused]


class TestNormalize:
    def test_min_max(self) -> None:
        assert min_max(A) == [("d1", 1.0), ("d2", 0.5), ("d3", 0.0)]

    def test_min_max_all_equal(self) -> None:
        assert min_max([("a", 2.0), ("b", 2.0)]) == [("a", 1.0), ("b", 1.0)]

    def test_z_score_zero_spread(self) -> None:
        assert z_score([("a", 2.0), ("b", 2.0)]) == [("a", 0.0), ("b", 0.0)]

    def test_z_score_is_clipped(self) -> None:
        scores = [("out", 100.0)] + [(f"d{i}", 0.0) for i in range(20)]
        assert z_score(scores)[0][1] == 3.0

    def test_empty(self) -> None:
        assert min_max([]) == []
        assert z_score([]) == []


class TestRankBased:
    def test_rrf(self) -> None:
        fused = rrf(A, B)
        assert _ids(fused) == ["d2", "d1", "d4", "d3"]
        assert fused[0][1] == pytest.approx(1 / 62 + 1 / 61)

    def test_rrf_custom_k(self) -> None:
        fused = rrf(A, B, RrfConfig(k=1))
        assert fused[1] == ("d1", pytest.approx(0.5))

    def test_rrf_rejects_non_positive_k(self) -> None:
        with pytest.raises(FusionError):
            RrfConfig(k=0)
        with pytest.raises(FusionError):
            IsrConfig(k=-1)

    def test_isr(self) -> None:
        fused = isr(A, B)
        assert _ids(fused) == ["d2", "d1", "d4", "d3"]
        assert fused[-1][1] == pytest.approx(1 / math.sqrt(4))

    def test_borda(self) -> None:
        fused = borda(A, B)
        assert fused == [("d2", 4.0), ("d1", 3.0), ("d3", 1.0), ("d4", 1.0)]

    def test_top_k(self) -> None:
        assert _ids(rrf_multi([A, B], RrfConfig(top_k=2))) == ["d2", "d1"]

    def test_duplicates_count_once_at_best_rank(self) -> None:
        noisy = [("x", 5.0), ("y", 4.0), ("x", 1.0)]
        fused = rrf_multi([noisy])
        assert fused == [("x", pytest.approx(1 / 61)), ("y", pytest.approx(1 / 62))]

    def test_single_list_keeps_order(self) -> None:
        assert _ids(isr_multi([A])) == ["d1", "d2", "d3"]


class TestScoreBased:
    def test_combsum(self) -> None:
        assert combsum(A, B) == [("d2", 1.5), ("d1", 1.0), ("d3", 0.0), ("d4", 0.0)]

    def test_combmnz(self) -> None:
        assert combmnz(A, B) == [("d2", 3.0), ("d1", 1.0), ("d3", 0.0), ("d4", 0.0)]

    def test_dbsf(self) -> None:
        assert _ids(dbsf(A, B)) == ["d1", "d2", "d4", "d3"]

    def test_comb_top_k(self) -> None:
        assert len(combsum(A, B, CombConfig(top_k=1))) == 1

    def test_weighted(self) -> None:
        fused = weighted([A, B], [1.0, 0.0])
        assert fused == [("d1", 1.0), ("d2", 0.5), ("d3", 0.0), ("d4", 0.0)]

    def test_weighted_without_normalization(self) -> None:
        fused = weighted([A, B], [1.0, 1.0], normalize=False)
        assert fused[0] == ("d1", 3.0)
        assert fused[1] == ("d2", pytest.approx(2.9))

    def test_weighted_validation(self) -> None:
        with pytest.raises(FusionError):
            weighted([A, B], [1.0])
        with pytest.raises(FusionError):
            weighted([A, B], [1.0, -1.0])
        with pytest.raises(FusionError):
            weighted([A, B], [0.0, 0.0])


class TestDispatch:
    def test_unknown_method(self) -> None:
        with pytest.raises(FusionError, match="Unknown fusion method"):
            fuse("median", [A, B])

    def test_no_lists(self) -> None:
        assert fuse("rrf", []) == []

    def test_defaults_match_direct_call(self) -> None:
        assert fuse("rrf", [A, B]) == rrf(A, B)
        assert fuse("borda", [A, B]) == borda(A, B)

    def test_weighted_without_config_uses_equal_weights(self) -> None:
        assert fuse("weighted", [A, B]) == weighted([A, B], [1.0, 1.0])

    def test_config_parameters_are_used(self) -> None:
        config = FusionConfig(config_version="1.0.0", method="rrf", rrf_k=1.0, top_k=1)
        assert fuse("rrf", [A, B], config) == rrf(A, B, RrfConfig(k=1.0, top_k=1))

    def test_weighted_config(self) -> None:
        config = FusionConfig(config_version="1.0.0", method="weighted", weights=[0.0, 1.0])
        assert _ids(fuse("weighted", [A, B], config))[0] == "d2"
