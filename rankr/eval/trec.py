# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
TREC run and qrels files.

qrels:  <query_id> <iteration> <doc_id> <relevance>
run:    <query_id> Q0 <doc_id> <rank> <score> <run_tag>

Fields are whitespace separated. Blank lines and lines starting with `#`
are skipped. Any other malformed line raises TrecFormatError naming the
file and line number, so a bad file never evaluates silently.

The rank column of a run is informational only: like trec_eval we order each
query's documents by score descending, breaking ties by doc id descending.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Sequence

from rankr.eval.errors import TrecFormatError
from rankr.logging.logger import get_logger
from rankr.utils.filesystem import atomic_write

logger = get_logger(__name__)

QRELS_FIELDS = 4
RUN_FIELDS = 6
DEFAULT_RUN_TAG = "rankr"


@dataclass
class Qrels:
    """Relevance judgments: query id -> {doc id: grade}."""

    judgments: dict[str, dict[str, int]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.judgments)

    def __contains__(self, query_id: object) -> bool:
        return query_id in self.judgments

    def query_ids(self) -> list[str]:
        return sorted(self.judgments)

    def grades(self, query_id: str) -> dict[str, int]:
        return dict(self.judgments.get(query_id, {}))

    def relevant_docs(self, query_id: str, threshold: int = 1) -> set[str]:
        """Docs judged at or above `threshold` for the query."""
        return {
            doc_id
            for doc_id, grade in self.judgments.get(query_id, {}).items()
            if grade >= threshold
        }

    def max_grade(self) -> int:
        grades = [g for judged in self.judgments.values() for g in judged.values()]
        return max(grades) if grades else 0


@dataclass
class TrecRun:
    """Ranked results per query, best first."""

    results: dict[str, list[tuple[str, float]]] = field(default_factory=dict)
    tag: str = DEFAULT_RUN_TAG

    def __len__(self) -> int:
        return len(self.results)

    def __contains__(self, query_id: object) -> bool:
        return query_id in self.results

    def query_ids(self) -> list[str]:
        return sorted(self.results)

    def ranked_doc_ids(self, query_id: str) -> list[str]:
        return [doc_id for doc_id, _ in self.results.get(query_id, [])]

    def add_query(self, query_id: str, results: Sequence[tuple[str, float]]) -> None:
        self.results[query_id] = list(results)


def _data_lines(path: Path) -> Iterator[tuple[int, list[str]]]:
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            yield line_number, stripped.split()


def read_qrels(path: Path) -> Qrels:
    """
    Parse a qrels file. A repeated (query, doc) pair keeps the last grade.

    Raises:
        TrecFormatError: On a line without exactly 4 fields or a non-integer grade.
    """
    judgments: dict[str, dict[str, int]] = {}
    for line_number, parts in _data_lines(path):
        if len(parts) != QRELS_FIELDS:
            raise TrecFormatError(
                f"{path}:{line_number}: expected {QRELS_FIELDS} fields "
                f"(qid iter docid rel), got {len(parts)}"
            )
        query_id, _iteration, doc_id, raw_grade = parts
        try:
            grade = int(raw_grade)
        except ValueError as err:
            raise TrecFormatError(
                f"{path}:{line_number}: relevance must be an integer, got {raw_grade!r}"
            ) from err
        judgments.setdefault(query_id, {})[doc_id] = grade

    logger.debug("Qrels loaded", extra={"path": str(path), "queries": len(judgments)})
    return Qrels(judgments=judgments)


def read_run(path: Path) -> TrecRun:
    """
    Parse a run file.

    Raises:
        TrecFormatError: On a line without exactly 6 fields, a non-numeric
            rank or score, or a doc listed twice for the same query.
    """
    results: dict[str, list[tuple[str, float]]] = {}
    seen: set[tuple[str, str]] = set()
    tag: str | None = None

    for line_number, parts in _data_lines(path):
        if len(parts) != RUN_FIELDS:
            raise TrecFormatError(
                f"{path}:{line_number}: expected {RUN_FIELDS} fields "
                f"(qid Q0 docid rank score tag), got {len(parts)}"
            )
        query_id, _q0, doc_id, raw_rank, raw_score, line_tag = parts
        try:
            int(raw_rank)
            score = float(raw_score)
        except ValueError as err:
            raise TrecFormatError(
                f"{path}:{line_number}: rank must be an integer and score a number"
            ) from err

        if (query_id, doc_id) in seen:
            raise TrecFormatError(
                f"{path}:{line_number}: duplicate document {doc_id!r} for query {query_id!r}"
            )
        seen.add((query_id, doc_id))

        if tag is None:
            tag = line_tag
        results.setdefault(query_id, []).append((doc_id, score))

    for query_id, ranked in results.items():
        # Two stable sorts: doc id descending, then score descending.
        ranked.sort(key=lambda item: item[0], reverse=True)
        ranked.sort(key=lambda item: item[1], reverse=True)

    logger.debug("Run loaded", extra={"path": str(path), "queries": len(results)})
    return TrecRun(results=results, tag=tag or DEFAULT_RUN_TAG)


def format_run(run: TrecRun, tag: str | None = None) -> str:
    run_tag = tag or run.tag
    lines: list[str] = []
    for query_id in run.query_ids():
        for rank, (doc_id, score) in enumerate(run.results[query_id], start=1):
            lines.append(f"{query_id} Q0 {doc_id} {rank} {float(score)!r} {run_tag}")
    return "\n".join(lines) + ("\n" if lines else "")


def write_run(run: TrecRun, path: Path, tag: str | None = None) -> Path:
    """
    Write a run in query id order, keeping each query's result order.

    Scores are written at full float precision, so near-equal scores do not
    collapse into ties that `read_run` would reorder.
    """
    atomic_write(path, format_run(run, tag))
    return path


def write_qrels(qrels: Qrels, path: Path) -> Path:
    lines = [
        f"{query_id} 0 {doc_id} {grade}"
        for query_id in qrels.query_ids()
        for doc_id, grade in sorted(qrels.judgments[query_id].items())
    ]
    atomic_write(path, "\n".join(lines) + ("\n" if lines else ""))
    return path


def read_topics(path: Path) -> dict[str, str]:
    """
    Read query topics as `query_id -> text`.

    `.jsonl` files hold one {"id": ..., "text": ...} object per line; anything
    else is read as tab-separated `query_id<TAB>text` lines.

    Raises:
        TrecFormatError: On a malformed line or a repeated query id.
    """
    topics: dict[str, str] = {}
    is_jsonl = path.suffix == ".jsonl"
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if is_jsonl:
                try:
                    record = json.loads(stripped)
                    query_id, text = str(record["id"]), str(record["text"])
                except (json.JSONDecodeError, KeyError, TypeError) as err:
                    raise TrecFormatError(
                        f"{path}:{line_number}: expected an object with id and text"
                    ) from err
            else:
                query_id, sep, text = stripped.partition("\t")
                if not sep:
                    raise TrecFormatError(f"{path}:{line_number}: expected query_id<TAB>text")
            if query_id in topics:
                raise TrecFormatError(f"{path}:{line_number}: duplicate query id {query_id!r}")
            topics[query_id] = text.strip()
    return topics
