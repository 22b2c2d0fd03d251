# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Ranking SVM training loop for RankerModel.

Each step processes one query: the model scores the query's documents,
Ranking SVM turns those scores into per-document ascent directions, and
`scores.backward(-lambdas)` hands them to autograd so the optimizer can
update the weights. Query order is shuffled every epoch with a generator
seeded from the config, so identical configs train identical models.

Checkpoints are a single torch file holding the architecture and the state
dict, written atomically with a `.sha256` sidecar.
"""

import io
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import torch
import torch.nn as nn

from rankr.config.schema import LearnConfig
from rankr.eval.metrics.graded import compute_ndcg
from rankr.learn.dataset import LetorDataset
from rankr.learn.errors import LearnError
from rankr.learn.model import RankerModel
from rankr.learn.ranking_svm import RankingSVMParams, RankingSVMTrainer
from rankr.logging.logger import get_logger
from rankr.utils.filesystem import atomic_write, atomic_write_bytes
from rankr.utils.hashing import checksum_path, compute_sha256, verify_checksum

logger = get_logger(__name__)

NDCG_CUTOFF = 10


@dataclass(frozen=True)
class EpochStats:
    epoch: int
    mean_loss: float
    ndcg_at_10: float
    elapsed_seconds: float


@dataclass
class TrainingHistory:
    epochs: list[EpochStats] = field(default_factory=list)

    @property
    def final(self) -> EpochStats | None:
        return self.epochs[-1] if self.epochs else None


def _param_groups(model: nn.Module, weight_decay: float) -> list[dict[str, object]]:
    """Weight decay on weight matrices only; biases stay undecayed."""
    decay: list[torch.Tensor] = []
    no_decay: list[torch.Tensor] = []
    for param in model.parameters():
        if not param.requires_grad:
            continue
        (decay if param.dim() >= 2 else no_decay).append(param)
    return [
        {"params": decay, "weight_decay": weight_decay},
        {"params": no_decay, "weight_decay": 0.0},
    ]


def create_optimizer(model: nn.Module, config: LearnConfig) -> torch.optim.Optimizer:
    groups = _param_groups(model, config.weight_decay)
    if config.optimizer == "adamw":
        return torch.optim.AdamW(groups, lr=config.learning_rate)
    return torch.optim.SGD(groups, lr=config.learning_rate)


def score_features(model: RankerModel, features: Sequence[Sequence[float]]) -> list[float]:
    """Score feature vectors without tracking gradients."""
    if not features:
        return []
    model.eval()
    with torch.no_grad():
        scores = model(torch.tensor(features, dtype=torch.float32))
    return scores.tolist()


def rerank_with_model(
    model: RankerModel,
    doc_ids: Sequence[str],
    features: Sequence[Sequence[float]],
) -> list[tuple[str, float]]:
    """Rank documents by model score, best first, ties by doc id."""
    if len(doc_ids) != len(features):
        raise LearnError(f"Got {len(doc_ids)} doc ids for {len(features)} feature vectors")
    scored = list(zip(doc_ids, score_features(model, features)))
    return sorted(scored, key=lambda item: (-item[1], item[0]))


def evaluate_ndcg(model: RankerModel, dataset: LetorDataset, k: int = NDCG_CUTOFF) -> float:
    """Mean nDCG@k of the model's ranking over every query in the dataset."""
    values: list[float] = []
    for query_id in dataset.query_ids():
        query = dataset.queries[query_id]
        ranked = rerank_with_model(model, query.doc_ids, query.features)
        grades = {doc_id: int(rel) for doc_id, rel in zip(query.doc_ids, query.relevance)}
        values.append(compute_ndcg([doc_id for doc_id, _ in ranked], grades, k))
    return sum(values) / len(values) if values else 0.0


def train_ranker(
    dataset: LetorDataset,
    config: LearnConfig,
    seed: int = 42,
) -> tuple[RankerModel, TrainingHistory]:
    """
    Train a fresh RankerModel on `dataset`.

    Raises:
        LearnError: If the dataset has no queries or no features.
    """
    if not dataset.queries:
        raise LearnError("Training dataset has no queries")
    if dataset.num_features < 1:
        raise LearnError("Training dataset has no features")

    torch.manual_seed(seed)
    rng = random.Random(seed)

    model = RankerModel(dataset.num_features, config.hidden_dims)
    optimizer = create_optimizer(model, config)
    svm = RankingSVMTrainer(RankingSVMParams.from_config(config))
    history = TrainingHistory()

    query_ids = dataset.query_ids()
    logger.info(
        "Starting ranker training",
        extra={
            "queries": len(query_ids),
            "documents": dataset.num_documents,
            "features": dataset.num_features,
            "epochs": config.epochs,
            "optimizer": config.optimizer,
        },
    )

    for epoch in range(1, config.epochs + 1):
        start = time.monotonic()
        rng.shuffle(query_ids)
        losses: list[float] = []

        model.train()
        for query_id in query_ids:
            query = dataset.queries[query_id]
            features = torch.tensor(query.features, dtype=torch.float32)
            scores = model(features)

            detached = scores.detach().tolist()
            losses.append(svm.compute_loss(detached, query.relevance))
            lambdas = svm.compute_gradients(detached, query.relevance)
            if not any(lambdas):
                continue

            optimizer.zero_grad()
            scores.backward(-torch.tensor(lambdas, dtype=scores.dtype))
            optimizer.step()

        stats = EpochStats(
            epoch=epoch,
            mean_loss=sum(losses) / len(losses) if losses else 0.0,
            ndcg_at_10=evaluate_ndcg(model, dataset),
            elapsed_seconds=time.monotonic() - start,
        )
        history.epochs.append(stats)
        logger.info(
            "Epoch complete",
            extra={
                "epoch": epoch,
                "mean_loss": round(stats.mean_loss, 6),
                "ndcg_at_10": round(stats.ndcg_at_10, 6),
            },
        )

    return model, history


def save_ranker(model: RankerModel, path: Path) -> Path:
    """Write the checkpoint and its checksum sidecar; returns the checkpoint path."""
    buffer = io.BytesIO()
    torch.save(
        {
            "num_features": model.num_features,
            "hidden_dims": model.hidden_dims,
            "state_dict": model.state_dict(),
        },
        buffer,
    )
    atomic_write_bytes(path, buffer.getvalue())
    atomic_write(checksum_path(path), compute_sha256(path) + "\n")
    logger.info("Ranker saved", extra={"path": str(path)})
    return path


def load_ranker(path: Path) -> RankerModel:
    """
    Raises:
        LearnError: If the checkpoint or its sidecar is missing or the
            checksum does not match.
    """
    sidecar = checksum_path(path)
    if not path.is_file() or not sidecar.is_file():
        raise LearnError(f"Ranker checkpoint or checksum missing: {path}")
    if not verify_checksum(path, sidecar.read_text(encoding="utf-8")):
        raise LearnError(f"Checksum mismatch for ranker checkpoint {path}")

    payload = torch.load(path, map_location="cpu", weights_only=True)
    model = RankerModel(int(payload["num_features"]), list(payload["hidden_dims"]))
    model.load_state_dict(payload["state_dict"])
    model.eval()
    return model
