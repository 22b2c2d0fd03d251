# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for Ranking SVM loss and gradients."""

import math

import pytest

from rankr.config.schema import LearnConfig
from rankr.learn.errors import EmptyInputError, LengthMismatchError
from rankr.learn.ranking_svm import (
    RankingSVMParams,
    RankingSVMTrainer,
    compute_ranking_svm_gradients,
    mean_pairwise_loss,
    pairwise_hinge_loss,
)

PLAIN = RankingSVMParams(query_normalization=False, cost_sensitivity=False)


class TestHingeLoss:
    def test_violated_margin(self) -> None:
        assert pairwise_hinge_loss(0.5, 0.0) == pytest.approx(0.5)

    def test_satisfied_margin(self) -> None:
        assert pairwise_hinge_loss(3.0, 1.0) == 0.0

    def test_mean_over_pairs(self) -> None:
        assert mean_pairwise_loss([0.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
        assert mean_pairwise_loss([0.5, 0.0], [1.0, 0.0]) == pytest.approx(0.5)

    def test_no_valid_pairs(self) -> None:
        assert mean_pairwise_loss([0.3, 0.1, 0.2], [1.0, 1.0, 1.0]) == 0.0


class TestGradients:
    def test_plain_pair(self) -> None:
        assert compute_ranking_svm_gradients([0.0, 0.0], [1.0, 0.0], PLAIN) == [1.0, -1.0]

    def test_higher_doc_later_in_list(self) -> None:
        assert compute_ranking_svm_gradients([0.0, 0.0], [0.0, 2.0], PLAIN) == [-1.0, 1.0]

    def test_satisfied_pair_contributes_nothing(self) -> None:
        assert compute_ranking_svm_gradients([2.0, 0.0], [1.0, 0.0], PLAIN) == [0.0, 0.0]

    def test_cost_sensitivity_weights_top_positions(self) -> None:
        gradients = compute_ranking_svm_gradients([0.0, 0.0], [1.0, 0.0])
        expected = 1.0 / math.log(2)
        assert gradients[0] == pytest.approx(expected)
        assert gradients[1] == pytest.approx(-expected)

    def test_query_normalization(self) -> None:
        params = RankingSVMParams(cost_sensitivity=False)
        # pairs (0,1) (0,2) (1,2), mu = 1/3
        gradients = compute_ranking_svm_gradients([0.0, 0.0, 0.0], [2.0, 1.0, 0.0], params)
        assert gradients == pytest.approx([2 / 3, 0.0, -2 / 3])

    def test_c_scales_contributions(self) -> None:
        params = RankingSVMParams(c=2.5, query_normalization=False, cost_sensitivity=False)
        assert compute_ranking_svm_gradients([0.0, 0.0], [1.0, 0.0], params) == [2.5, -2.5]

    def test_gradients_sum_to_zero(self) -> None:
        gradients = compute_ranking_svm_gradients([0.3, -0.1, 0.9, 0.0], [0.0, 2.0, 1.0, 0.0])
        assert sum(gradients) == pytest.approx(0.0)

    def test_length_mismatch(self) -> None:
        with pytest.raises(LengthMismatchError) as excinfo:
            compute_ranking_svm_gradients([0.0], [1.0, 0.0])
        assert excinfo.value.scores_len == 1
        assert excinfo.value.relevance_len == 2

    def test_empty_input(self) -> None:
        with pytest.raises(EmptyInputError):
            compute_ranking_svm_gradients([], [])


class TestParams:
    def test_from_config(self) -> None:
        config = LearnConfig(config_version="1.0.0", c=0.5, cost_sensitivity=False)
        params = RankingSVMParams.from_config(config)
        assert params.c == 0.5
        assert params.cost_sensitivity is False
        assert params.query_normalization is True

    def test_trainer_delegates(self) -> None:
        trainer = RankingSVMTrainer(PLAIN)
        assert trainer.compute_gradients([0.0, 0.0], [1.0, 0.0]) == [1.0, -1.0]
        assert trainer.compute_loss([0.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
