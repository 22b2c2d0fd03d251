# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for rankr tests.

Fixtures here are available to every test file automatically. Kept small:
config files for the loader/CLI tests and a tiny judged collection that the
retrieval, evaluation and CLI tests all search.
"""

import json
import logging
import textwrap
from pathlib import Path
from typing import Iterator

import pytest

from rankr.logging.logger import ConsoleHandler
from rankr.retrieve.analysis import Analyzer
from rankr.retrieve.index import InvertedIndex

CORPUS = [
    {"id": "d1", "text": "The quick brown fox jumps over the lazy dog", "metadata": {"lang": 1}},
    {"id": "d2", "text": "A fast brown fox leaps over sleeping dogs", "metadata": {"lang": 1}},
    {"id": "d3", "text": "Information retrieval ranks documents for a query", "metadata": {"lang": 2}},
    {"id": "d4", "text": "Query likelihood models rank documents by probability", "metadata": {"lang": 2}},
    {"id": "d5", "text": "Rank fusion combines ranked lists from many retrieval systems"},
]


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """
    CLI tests re-level the `rankr` logger, retarget its console and attach
    log files. Put it back to INFO on stdout with no files after each test.
    """
    yield
    package_logger = logging.getLogger("rankr")
    package_logger.setLevel(logging.INFO)
    for handler in list(package_logger.handlers):
        if isinstance(handler, ConsoleHandler):
            handler.stream_name = "stdout"
        elif isinstance(handler, logging.FileHandler):
            handler.close()
            package_logger.removeHandler(handler)


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    The smallest config that passes schema validation. Tests that need
    specific values write their own files.
    """
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "rankr-test"
          seed: 42
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (config_version is missing)."""
    config_content = textwrap.dedent("""\
        global:
          project_name: "rankr-test"
          seed: 42
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


@pytest.fixture()
def corpus_file(tmp_path: Path) -> Path:
    path = tmp_path / "corpus.jsonl"
    path.write_text("\n".join(json.dumps(doc) for doc in CORPUS) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def small_index() -> InvertedIndex:
    """CORPUS analyzed with the default analyzer."""
    analyzer = Analyzer()
    index = InvertedIndex()
    for doc in CORPUS:
        index.add_document(doc["id"], analyzer.analyze(doc["text"]))
    return index
