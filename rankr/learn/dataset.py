# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
LETOR / SVMlight feature files.

One document per line:

    <relevance> qid:<query_id> <index>:<value> ... [# docid = <doc_id> ...]

Feature indices are 1-based and may be sparse; absent features are 0. The
dataset's feature dimension is the largest index seen anywhere in the file.
When the trailing comment names no doc id, documents are called
`<query_id>-<n>` in file order.
"""

from dataclasses import dataclass, field
from pathlib import Path

from rankr.eval.trec import Qrels
from rankr.learn.errors import LetorFormatError


@dataclass
class LetorQuery:
    query_id: str
    doc_ids: list[str] = field(default_factory=list)
    relevance: list[float] = field(default_factory=list)
    features: list[list[float]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.doc_ids)


@dataclass
class LetorDataset:
    queries: dict[str, LetorQuery] = field(default_factory=dict)
    num_features: int = 0

    def query_ids(self) -> list[str]:
        return sorted(self.queries)

    @property
    def num_documents(self) -> int:
        return sum(len(q) for q in self.queries.values())

    def to_qrels(self) -> Qrels:
        """Relevance labels as qrels, so model rankings can go through rankr eval."""
        return Qrels(
            judgments={
                qid: {doc_id: int(rel) for doc_id, rel in zip(q.doc_ids, q.relevance)}
                for qid, q in self.queries.items()
            }
        )


def _parse_doc_id(comment: str) -> str | None:
    tokens = comment.replace("=", " = ").replace(":", " : ").split()
    if "docid" not in tokens:
        return None
    position = tokens.index("docid") + 1
    while position < len(tokens) and tokens[position] in ("=", ":"):
        position += 1
    return tokens[position] if position < len(tokens) else None


def load_letor(path: Path) -> LetorDataset:
    """
    Raises:
        LetorFormatError: On a missing qid, a bad feature token or a
            non-numeric relevance / value.
    """
    # (query_id, doc_id, relevance, sparse features) in file order
    rows: list[tuple[str, str | None, float, dict[int, float]]] = []
    max_index = 0

    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            body, _, comment = line.partition("#")
            parts = body.split()
            if not parts:
                continue
            where = f"{path}:{line_number}"

            try:
                relevance = float(parts[0])
            except ValueError as err:
                raise LetorFormatError(f"{where}: relevance must be a number, got {parts[0]!r}") from err

            if len(parts) < 2 or not parts[1].startswith("qid:"):
                raise LetorFormatError(f"{where}: second field must be qid:<id>")
            query_id = parts[1][len("qid:"):]
            if not query_id:
                raise LetorFormatError(f"{where}: empty query id")

            features: dict[int, float] = {}
            for token in parts[2:]:
                raw_index, sep, raw_value = token.partition(":")
                try:
                    index = int(raw_index)
                    value = float(raw_value)
                except ValueError as err:
                    raise LetorFormatError(f"{where}: bad feature token {token!r}") from err
                if not sep or index < 1:
                    raise LetorFormatError(f"{where}: bad feature token {token!r}")
                features[index] = value
                max_index = max(max_index, index)

            rows.append((query_id, _parse_doc_id(comment), relevance, features))

    dataset = LetorDataset(num_features=max_index)
    for query_id, doc_id, relevance, sparse in rows:
        query = dataset.queries.setdefault(query_id, LetorQuery(query_id=query_id))
        dense = [0.0] * max_index
        for index, value in sparse.items():
            dense[index - 1] = value
        query.doc_ids.append(doc_id or f"{query_id}-{len(query.doc_ids)}")
        query.relevance.append(relevance)
        query.features.append(dense)

    return dataset
