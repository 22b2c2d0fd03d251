# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Determinism tests for the runtime bootstrap: run twice with the same seed,
compare outputs, and treat any mismatch as failure.
"""

import os
import random
from pathlib import Path

import pytest
import torch

from rankr.benchmark.datasets import StandardDataset
from rankr.config.schema import GlobalConfig
from rankr.eval.statistics import paired_randomization_test
from rankr.runtime.bootstrap import bootstrap, set_deterministic_seed
from rankr.runtime.environment import check_minimum_python, get_python_version, get_system_info


class TestDeterministicSeed:
    def test_same_seed_same_sequence(self) -> None:
        set_deterministic_seed(42)
        sequence_a = [random.random() for _ in range(10)]
        tensor_a = torch.rand(4)

        set_deterministic_seed(42)
        sequence_b = [random.random() for _ in range(10)]
        tensor_b = torch.rand(4)

        assert sequence_a == sequence_b
        assert torch.equal(tensor_a, tensor_b)

    def test_sets_hash_seed(self) -> None:
        set_deterministic_seed(7)
        assert os.environ["PYTHONHASHSEED"] == "7"


class TestSeededComponents:
    def test_benchmark_dataset_repeats(self) -> None:
        assert StandardDataset.TINY.generate(seed=3) == StandardDataset.TINY.generate(seed=3)

    def test_randomization_test_repeats(self) -> None:
        a = [0.2, 0.5, 0.9, 0.1, 0.4]
        b = [0.1, 0.5, 0.7, 0.3, 0.2]
        assert paired_randomization_test(a, b, trials=500, seed=1) == paired_randomization_test(
            a, b, trials=500, seed=1
        )


class TestEnvironment:
    def test_current_python_passes(self) -> None:
        check_minimum_python()
        assert get_python_version() >= (3, 11, 0)

    def test_old_python_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("rankr.runtime.environment.get_python_version", lambda: (3, 9, 0))
        with pytest.raises(RuntimeError, match="requires Python"):
            check_minimum_python()

    def test_system_info(self) -> None:
        info = get_system_info()
        assert info.torch_version == torch.__version__
        assert info.python_version


class TestBootstrap:
    def test_creates_project_directories(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        bootstrap(GlobalConfig(config_version="1.0.0", seed=5))
        for name in ("data", "indexes", "runs", "logs", "experiments"):
            assert (tmp_path / name).is_dir()
        assert os.environ["PYTHONHASHSEED"] == "5"
