# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the ranker model, training loop and checkpoints."""

from pathlib import Path

import pytest
import torch

from rankr.config.schema import LearnConfig
from rankr.learn.dataset import LetorDataset, load_letor
from rankr.learn.errors import LearnError
from rankr.learn.model import RankerModel
from rankr.learn.trainer import (
    create_optimizer,
    evaluate_ndcg,
    load_ranker,
    rerank_with_model,
    save_ranker,
    score_features,
    train_ranker,
)

# Feature 1 equals the label; feature 2 carries no signal.
LETOR = """\
2 qid:1 1:2 2:1 # docid = a
0 qid:1 1:0 2:1 # docid = b
1 qid:1 1:1 2:1 # docid = c
0 qid:2 1:0 2:1 # docid = d
2 qid:2 1:2 2:1 # docid = e
1 qid:3 1:1 2:1 # docid = f
0 qid:3 1:0 2:1 # docid = g
2 qid:3 1:2 2:1 # docid = h
"""


@pytest.fixture()
def dataset(tmp_path: Path) -> LetorDataset:
    path = tmp_path / "train.txt"
    path.write_text(LETOR, encoding="utf-8")
    return load_letor(path)


def _config(**overrides: object) -> LearnConfig:
    values: dict[str, object] = {
        "config_version": "1.0.0",
        "epochs": 30,
        "learning_rate": 0.1,
        "optimizer": "sgd",
    }
    values.update(overrides)
    return LearnConfig(**values)


class TestRankerModel:
    def test_linear_output_shape(self) -> None:
        model = RankerModel(4)
        assert model(torch.zeros(3, 4)).shape == (3,)

    def test_mlp_output_shape(self) -> None:
        model = RankerModel(4, [8, 4])
        assert model(torch.zeros(5, 4)).shape == (5,)

    def test_rejects_zero_features(self) -> None:
        with pytest.raises(ValueError):
            RankerModel(0)


class TestOptimizer:
    def test_sgd(self) -> None:
        assert isinstance(create_optimizer(RankerModel(2), _config()), torch.optim.SGD)

    def test_adamw_decays_weights_only(self) -> None:
        optimizer = create_optimizer(RankerModel(2), _config(optimizer="adamw", weight_decay=0.1))
        assert isinstance(optimizer, torch.optim.AdamW)
        decays = [group["weight_decay"] for group in optimizer.param_groups]
        assert decays == [0.1, 0.0]


class TestReranking:
    def test_ties_break_by_doc_id(self) -> None:
        model = RankerModel(1)
        with torch.no_grad():
            model.net[0].weight.fill_(1.0)
            model.net[0].bias.fill_(0.0)
        ranked = rerank_with_model(model, ["z", "a", "m"], [[1.0], [1.0], [2.0]])
        assert [doc_id for doc_id, _ in ranked] == ["m", "a", "z"]

    def test_length_mismatch(self) -> None:
        with pytest.raises(LearnError):
            rerank_with_model(RankerModel(1), ["a"], [[1.0], [2.0]])

    def test_score_features_empty(self) -> None:
        assert score_features(RankerModel(1), []) == []


class TestTraining:
    def test_learns_signal_feature(self, dataset: LetorDataset) -> None:
        model, history = train_ranker(dataset, _config(), seed=7)
        assert len(history.epochs) == 30
        assert history.final is not None
        assert history.final.ndcg_at_10 == pytest.approx(1.0)
        assert evaluate_ndcg(model, dataset) == pytest.approx(1.0)
        assert history.final.mean_loss <= history.epochs[0].mean_loss

    def test_same_seed_same_model(self, dataset: LetorDataset) -> None:
        first, _ = train_ranker(dataset, _config(epochs=3), seed=11)
        second, _ = train_ranker(dataset, _config(epochs=3), seed=11)
        for name, tensor in first.state_dict().items():
            assert torch.equal(tensor, second.state_dict()[name])

    def test_empty_dataset(self) -> None:
        with pytest.raises(LearnError, match="no queries"):
            train_ranker(LetorDataset(), _config())


class TestCheckpoints:
    def test_round_trip(self, tmp_path: Path, dataset: LetorDataset) -> None:
        model, _ = train_ranker(dataset, _config(epochs=2, hidden_dims=[4]))
        path = save_ranker(model, tmp_path / "ranker.pt")
        assert (tmp_path / "ranker.pt.sha256").exists()

        loaded = load_ranker(path)
        assert loaded.hidden_dims == [4]
        features = dataset.queries["1"].features
        assert score_features(loaded, features) == pytest.approx(score_features(model, features))

    def test_tampered_checkpoint(self, tmp_path: Path) -> None:
        path = save_ranker(RankerModel(2), tmp_path / "ranker.pt")
        path.write_bytes(path.read_bytes() + b"\x00")
        with pytest.raises(LearnError, match="Checksum mismatch"):
            load_ranker(path)

    def test_missing_sidecar(self, tmp_path: Path) -> None:
        path = save_ranker(RankerModel(2), tmp_path / "ranker.pt")
        (tmp_path / "ranker.pt.sha256").unlink()
        with pytest.raises(LearnError, match="missing"):
            load_ranker(path)
