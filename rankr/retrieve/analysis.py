# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Text analysis: raw text in, index terms out.

Normalization and splitting are delegated to the HuggingFace `tokenizers`
normalizers and pre-tokenizers so that document and query text go through
exactly the same Rust-backed pipeline. The index and every scorer only ever
see the output of `Analyzer.analyze`.
"""

from tokenizers import normalizers, pre_tokenizers

from rankr.config.schema import AnalyzerConfig


def _build_normalizer(config: AnalyzerConfig) -> normalizers.Normalizer:
    steps: list[normalizers.Normalizer] = []

    if config.nfkc:
        steps.append(normalizers.NFKC())

    if config.strip_accents:
        # StripAccents only removes combining marks, so decompose first.
        steps.append(normalizers.NFD())
        steps.append(normalizers.StripAccents())

    if config.lowercase:
        steps.append(normalizers.Lowercase())

    return normalizers.Sequence(steps)


def _is_term(token: str) -> bool:
    return any(ch.isalnum() for ch in token)


class Analyzer:
    """
    Turns text into a list of terms in document order.

    Splitting uses the `Whitespace` pre-tokenizer (`\\w+|[^\\w\\s]+`), so
    punctuation runs come out as separate tokens and are dropped here.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()
        self._normalizer = _build_normalizer(self.config)
        self._pre_tokenizer = pre_tokenizers.Whitespace()
        self._stopwords = frozenset(self.config.stopwords) if self.config.remove_stopwords else frozenset()

    def analyze(self, text: str) -> list[str]:
        if not text or text.isspace():
            return []

        normalized = self._normalizer.normalize_str(text)
        pieces = self._pre_tokenizer.pre_tokenize_str(normalized)

        terms: list[str] = []
        for token, _offsets in pieces:
            if not _is_term(token):
                continue
            if len(token) < self.config.min_term_length:
                continue
            if token in self._stopwords:
                continue
            terms.append(token)
        return terms
