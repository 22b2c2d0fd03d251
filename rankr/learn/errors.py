# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT


class LearnError(Exception):
    """Base class for learning-to-rank failures."""


class LengthMismatchError(LearnError):
    def __init__(self, scores_len: int, relevance_len: int) -> None:
        self.scores_len = scores_len
        self.relevance_len = relevance_len
        super().__init__(
            f"Length mismatch: {scores_len} scores but {relevance_len} relevance labels"
        )


class EmptyInputError(LearnError):
    def __init__(self) -> None:
        super().__init__("Empty input: need at least one document")


class LetorFormatError(LearnError):
    """A LETOR line is malformed. The message names the file and line."""
