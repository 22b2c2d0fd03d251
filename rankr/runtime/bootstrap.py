# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for rankr.

Every CLI command runs this before touching an index or a run file:
  1. Validate the environment (Python version)
  2. Seed every source of randomness
  3. Initialize the logger
  4. Ensure the project directories exist

Synthetic benchmark corpora, significance tests and ranker training all draw
random numbers, so a fixed seed here is what makes two invocations with the
same config produce byte-identical output.
"""

import os
import random
from pathlib import Path
from typing import Optional

import torch

from rankr.config.schema import GlobalConfig
from rankr.logging.logger import get_logger
from rankr.runtime.environment import check_minimum_python, get_system_info
from rankr.utils.paths import ensure_directory, resolve_project_root


def set_deterministic_seed(seed: int) -> None:
    """
    Seed `random`, PYTHONHASHSEED and torch (CPU and, when present, CUDA).

    Args:
        seed: Integer seed value. Must be >= 0.
    """
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.deterministic = True  # type: ignore[attr-defined]
        torch.backends.cudnn.benchmark = False  # type: ignore[attr-defined]


def _ensure_project_directories(project_root: Path, config: GlobalConfig) -> None:
    dirs = config.directories
    for name in (dirs.data, dirs.indexes, dirs.runs, dirs.logs, dirs.experiments):
        ensure_directory(project_root / name)


def bootstrap(config: GlobalConfig, log_level: Optional[str] = None) -> None:
    """
    Put the process into a known state: environment validated, seeds set,
    logger configured, directories ready.

    The level and log file are set on the `rankr` package logger, so every
    module logger follows them.

    Args:
        config: The validated global configuration.
        log_level: Overrides `config.log_level` when given (the --log-level flag).
    """
    check_minimum_python()
    set_deterministic_seed(config.seed)

    log_file = None
    if config.log_file is not None:
        log_file = Path(config.log_file)

    get_logger("rankr", log_level=log_level or config.log_level, log_file=log_file)
    logger = get_logger("rankr.runtime")

    system_info = get_system_info()
    logger.info(
        "rankr bootstrap complete",
        extra={
            "seed": config.seed,
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "torch_version": system_info.torch_version,
        },
    )

    try:
        project_root = resolve_project_root()
        _ensure_project_directories(project_root, config)
    except RuntimeError:
        logger.warning(
            "Could not resolve project root, skipping directory creation",
            extra={"cwd": os.getcwd()},
        )
