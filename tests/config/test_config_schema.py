# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the per-section pydantic models and their cross-field rules."""

import pytest
from pydantic import ValidationError

from rankr.config.schema import (
    AnalyzerConfig,
    EvalConfig,
    FusionConfig,
    GlobalConfig,
    LearnConfig,
    RankrConfig,
    RetrievalConfig,
    ServeConfig,
)

VERSION = "1.0.0"


class TestGlobalConfig:
    def test_requires_version(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig()  # type: ignore[call-arg]

    def test_negative_seed_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig(config_version=VERSION, seed=-1)

    def test_global_alias(self) -> None:
        config = RankrConfig.model_validate({"global": {"config_version": VERSION}})
        assert config.global_config.project_name == "rankr"


class TestAnalyzerConfig:
    def test_defaults(self) -> None:
        config = AnalyzerConfig()
        assert config.lowercase is True
        assert config.remove_stopwords is False
        assert "the" in config.stopwords

    def test_min_term_length_positive(self) -> None:
        with pytest.raises(ValidationError):
            AnalyzerConfig(min_term_length=0)


class TestRetrievalConfig:
    def test_defaults(self) -> None:
        config = RetrievalConfig(config_version=VERSION)
        assert config.methods == ["tfidf"]
        assert config.k == 100
        assert config.expansion.enabled is False

    def test_unknown_method(self) -> None:
        with pytest.raises(ValidationError):
            RetrievalConfig(config_version=VERSION, methods=["bm25"])

    def test_needs_a_method(self) -> None:
        with pytest.raises(ValidationError):
            RetrievalConfig(config_version=VERSION, methods=[])

    def test_jm_lambda_range(self) -> None:
        with pytest.raises(ValidationError):
            RetrievalConfig(config_version=VERSION, query_likelihood={"jm_lambda": 1.5})


class TestFusionConfig:
    def test_weighted_needs_weights(self) -> None:
        with pytest.raises(ValidationError, match="requires `weights`"):
            FusionConfig(config_version=VERSION, method="weighted")

    def test_negative_weight(self) -> None:
        with pytest.raises(ValidationError, match="non-negative"):
            FusionConfig(config_version=VERSION, weights=[0.5, -0.1])

    def test_all_zero_weights(self) -> None:
        with pytest.raises(ValidationError, match="positive"):
            FusionConfig(config_version=VERSION, weights=[0.0, 0.0])

    def test_rrf_k_positive(self) -> None:
        with pytest.raises(ValidationError):
            FusionConfig(config_version=VERSION, rrf_k=0)


class TestEvalConfig:
    def test_defaults(self) -> None:
        config = EvalConfig(config_version=VERSION)
        assert config.k_values == [5, 10, 20]
        assert config.relevance_threshold == 1

    def test_rejects_zero_cutoff(self) -> None:
        with pytest.raises(ValidationError, match="k_values"):
            EvalConfig(config_version=VERSION, k_values=[0, 10])

    def test_unknown_metric(self) -> None:
        with pytest.raises(ValidationError):
            EvalConfig(config_version=VERSION, metrics=["BLEU"])

    def test_by_alias_dump_round_trips(self) -> None:
        config = EvalConfig(config_version=VERSION, metrics=["R-Prec"])
        assert EvalConfig.model_validate(config.model_dump(by_alias=True)) == config


class TestLearnAndServe:
    def test_learn_optimizer_choices(self) -> None:
        with pytest.raises(ValidationError):
            LearnConfig(config_version=VERSION, optimizer="lbfgs")

    def test_learn_defaults(self) -> None:
        config = LearnConfig(config_version=VERSION)
        assert config.hidden_dims == []
        assert config.optimizer == "sgd"

    def test_serve_defaults_to_localhost(self) -> None:
        config = ServeConfig(config_version=VERSION)
        assert config.host == "127.0.0.1"

    def test_serve_port_range(self) -> None:
        with pytest.raises(ValidationError):
            ServeConfig(config_version=VERSION, port=70000)
