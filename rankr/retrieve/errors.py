# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exception hierarchy for the retrieval layer.

Everything raised from rankr.retrieve derives from RetrieveError so CLI
handlers can catch the whole family in one place.
"""


class RetrieveError(Exception):
    """Base class for retrieval failures."""


class EmptyQueryError(RetrieveError):
    """The query had no terms after analysis."""

    def __init__(self) -> None:
        super().__init__("Query is empty")


class EmptyIndexError(RetrieveError):
    """Retrieval was attempted against an index with no documents."""

    def __init__(self) -> None:
        super().__init__("Index is empty")


class DuplicateDocumentError(RetrieveError):
    def __init__(self, doc_id: str) -> None:
        self.doc_id = doc_id
        super().__init__(f"Document {doc_id!r} is already indexed")


class IndexIntegrityError(RetrieveError):
    """A persisted index is unreadable or does not match its checksum."""


class CorpusFormatError(RetrieveError):
    """A corpus record is missing a required field or is not valid JSON."""


class InvalidParameterError(RetrieveError):
    """A retrieval parameter is out of its valid range."""
