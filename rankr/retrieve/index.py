# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
In-memory inverted index with JSON persistence.

The index stores, per term, a postings map `doc_id -> term frequency`, plus
per-document lengths and collection-level counts. Every lexical scorer in
rankr.retrieve (TF-IDF, query likelihood, feedback expansion) reads from it.

Persisted indexes are a single JSON document written atomically next to a
`.sha256` sidecar. Loading refuses an index whose bytes no longer match the
sidecar, so a half-copied or hand-edited index fails loudly instead of
silently returning wrong scores.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence, Union

from rankr.retrieve.errors import (
    CorpusFormatError,
    DuplicateDocumentError,
    IndexIntegrityError,
)
from rankr.utils.filesystem import atomic_write, safe_read
from rankr.utils.hashing import checksum_path, compute_sha256, verify_checksum

INDEX_FORMAT_VERSION = 1

# A query is either plain terms or (term, weight) pairs.
Query = Sequence[Union[str, tuple[str, float]]]
ScoredDoc = tuple[str, float]


def weighted_terms(query: Query) -> list[tuple[str, float]]:
    """Normalize a query to (term, weight) pairs; plain terms weigh 1.0."""
    pairs: list[tuple[str, float]] = []
    for item in query:
        if isinstance(item, str):
            pairs.append((item, 1.0))
        else:
            term, weight = item
            pairs.append((term, float(weight)))
    return pairs


def top_k(scores: dict[str, float], k: int) -> list[ScoredDoc]:
    """Sort by score descending, doc id ascending, and keep the first k."""
    if k <= 0:
        return []
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:k]


class InvertedIndex:
    def __init__(self) -> None:
        self._postings: dict[str, dict[str, int]] = {}
        self._doc_lengths: dict[str, int] = {}
        self._collection_frequency: dict[str, int] = {}
        self._total_length = 0

    def add_document(self, doc_id: str, terms: Iterable[str]) -> None:
        """
        Index one document.

        Raises:
            DuplicateDocumentError: If `doc_id` is already indexed.
        """
        if doc_id in self._doc_lengths:
            raise DuplicateDocumentError(doc_id)

        counts: dict[str, int] = {}
        length = 0
        for term in terms:
            counts[term] = counts.get(term, 0) + 1
            length += 1

        for term, tf in counts.items():
            self._postings.setdefault(term, {})[doc_id] = tf
            self._collection_frequency[term] = self._collection_frequency.get(term, 0) + tf

        self._doc_lengths[doc_id] = length
        self._total_length += length

    @property
    def num_docs(self) -> int:
        return len(self._doc_lengths)

    @property
    def vocabulary_size(self) -> int:
        return len(self._postings)

    @property
    def collection_size(self) -> int:
        """Total number of term occurrences across all documents."""
        return self._total_length

    @property
    def avg_doc_length(self) -> float:
        if not self._doc_lengths:
            return 0.0
        return self._total_length / len(self._doc_lengths)

    def term_frequency(self, doc_id: str, term: str) -> int:
        return self._postings.get(term, {}).get(doc_id, 0)

    def document_length(self, doc_id: str) -> int:
        return self._doc_lengths.get(doc_id, 0)

    def doc_frequency(self, term: str) -> int:
        return len(self._postings.get(term, {}))

    def collection_frequency(self, term: str) -> int:
        return self._collection_frequency.get(term, 0)

    def postings(self, term: str) -> dict[str, int]:
        return dict(self._postings.get(term, {}))

    def document_terms(self, doc_id: str) -> dict[str, int]:
        """Term frequencies of one document, recovered by scanning postings."""
        return {
            term: postings[doc_id]
            for term, postings in self._postings.items()
            if doc_id in postings
        }

    def has_document(self, doc_id: str) -> bool:
        return doc_id in self._doc_lengths

    def document_ids(self) -> list[str]:
        """Document ids in insertion order."""
        return list(self._doc_lengths)

    def candidates(self, terms: Iterable[str]) -> list[str]:
        """Documents containing at least one of `terms`, in first-seen order."""
        seen: dict[str, None] = {}
        for term in terms:
            for doc_id in self._postings.get(term, {}):
                seen.setdefault(doc_id, None)
        return list(seen)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_version": INDEX_FORMAT_VERSION,
            "documents": dict(self._doc_lengths),
            "postings": {term: dict(p) for term, p in sorted(self._postings.items())},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InvertedIndex":
        version = data.get("format_version")
        if version != INDEX_FORMAT_VERSION:
            raise IndexIntegrityError(
                f"Unsupported index format version {version!r}, expected {INDEX_FORMAT_VERSION}"
            )
        try:
            documents = data["documents"]
            postings = data["postings"]
        except KeyError as err:
            raise IndexIntegrityError(f"Index is missing the {err.args[0]!r} section") from err

        index = cls()
        for doc_id, length in documents.items():
            index._doc_lengths[doc_id] = int(length)
            index._total_length += int(length)
        for term, doc_tfs in postings.items():
            index._postings[term] = {doc_id: int(tf) for doc_id, tf in doc_tfs.items()}
            index._collection_frequency[term] = sum(index._postings[term].values())
        return index

    def save(
        self,
        path: Path,
        analyzer_config: dict[str, Any] | None = None,
        metadata: dict[str, dict[str, int]] | None = None,
    ) -> Path:
        """
        Write the index as JSON plus a `.sha256` sidecar.

        `analyzer_config` and `metadata` ride along so that a later search
        analyzes queries the same way and can apply metadata filters.
        Returns the checksum file path.
        """
        payload = self.to_dict()
        payload["analyzer"] = analyzer_config
        payload["metadata"] = metadata or {}
        atomic_write(path, json.dumps(payload, sort_keys=True))

        sidecar = checksum_path(path)
        atomic_write(sidecar, compute_sha256(path) + "\n")
        return sidecar

    @classmethod
    def load(cls, path: Path) -> "InvertedIndex":
        return load_index_bundle(path).index


@dataclass
class IndexBundle:
    """An index plus the analyzer settings and metadata saved with it."""

    index: InvertedIndex
    analyzer_config: dict[str, Any] | None = None
    metadata: dict[str, dict[str, int]] = field(default_factory=dict)


def load_index_bundle(path: Path) -> IndexBundle:
    """
    Load a saved index and verify it against its checksum sidecar.

    Raises:
        IndexIntegrityError: If the file or sidecar is missing, the checksum
            does not match, or the JSON is not a valid index.
    """
    if not path.is_file():
        raise IndexIntegrityError(f"Index file not found: {path}")

    sidecar = checksum_path(path)
    if not sidecar.is_file():
        raise IndexIntegrityError(f"Checksum file not found: {sidecar}")

    expected = safe_read(sidecar)
    if not verify_checksum(path, expected):
        raise IndexIntegrityError(f"Checksum mismatch for {path}")

    try:
        data = json.loads(safe_read(path))
    except json.JSONDecodeError as err:
        raise IndexIntegrityError(f"Index is not valid JSON: {err}") from err

    return IndexBundle(
        index=InvertedIndex.from_dict(data),
        analyzer_config=data.get("analyzer"),
        metadata=data.get("metadata") or {},
    )


@dataclass(frozen=True)
class Document:
    doc_id: str
    text: str
    metadata: dict[str, int] = field(default_factory=dict)


def iter_corpus(path: Path) -> Iterator[Document]:
    """
    Stream documents from a JSONL corpus.

    Each non-blank line is an object with `id`, `text` and an optional
    `metadata` mapping of field name to integer category.

    Raises:
        CorpusFormatError: On invalid JSON or a missing `id` / `text`.
    """
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            try:
                record = json.loads(stripped)
            except json.JSONDecodeError as err:
                raise CorpusFormatError(f"{path}:{line_number}: invalid JSON ({err.msg})") from err
            if not isinstance(record, dict):
                raise CorpusFormatError(f"{path}:{line_number}: expected a JSON object")

            for required in ("id", "text"):
                if required not in record:
                    raise CorpusFormatError(
                        f"{path}:{line_number}: missing required field {required!r}"
                    )

            metadata = record.get("metadata") or {}
            try:
                metadata = {str(k): int(v) for k, v in metadata.items()}
            except (AttributeError, TypeError, ValueError) as err:
                raise CorpusFormatError(
                    f"{path}:{line_number}: metadata must map field names to integers"
                ) from err

            yield Document(doc_id=str(record["id"]), text=str(record["text"]), metadata=metadata)


def load_corpus(path: Path) -> list[Document]:
    return list(iter_corpus(path))
