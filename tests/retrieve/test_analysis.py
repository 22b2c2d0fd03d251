# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the text analyzer that feeds both indexing and querying."""

from rankr.config.schema import AnalyzerConfig
from rankr.retrieve.analysis import Analyzer


class TestDefaultAnalyzer:
    def test_lowercases_and_splits(self) -> None:
        assert Analyzer().analyze("Quick Brown FOX") == ["quick", "brown", "fox"]

    def test_drops_punctuation_tokens(self) -> None:
        assert Analyzer().analyze("hello, world!!") == ["hello", "world"]

    def test_strips_accents(self) -> None:
        assert Analyzer().analyze("Café RÉSUMÉ naïve") == ["cafe", "resume", "naive"]

    def test_empty_and_blank_text(self) -> None:
        analyzer = Analyzer()
        assert analyzer.analyze("") == []
        assert analyzer.analyze("   \t\n") == []

    def test_keeps_stopwords_by_default(self) -> None:
        assert Analyzer().analyze("the fox") == ["the", "fox"]


class TestConfiguredAnalyzer:
    def test_removes_stopwords_when_enabled(self) -> None:
        analyzer = Analyzer(AnalyzerConfig(remove_stopwords=True))
        assert analyzer.analyze("the fox and the dog") == ["fox", "dog"]

    def test_custom_stopword_list(self) -> None:
        analyzer = Analyzer(AnalyzerConfig(remove_stopwords=True, stopwords=["fox"]))
        assert analyzer.analyze("the fox") == ["the"]

    def test_min_term_length(self) -> None:
        analyzer = Analyzer(AnalyzerConfig(min_term_length=3))
        assert analyzer.analyze("a an fox") == ["fox"]

    def test_case_preserved_when_lowercase_disabled(self) -> None:
        analyzer = Analyzer(AnalyzerConfig(lowercase=False))
        assert analyzer.analyze("Fox") == ["Fox"]

    def test_same_text_same_terms(self) -> None:
        text = "Rank fusion combines ranked lists"
        assert Analyzer().analyze(text) == Analyzer().analyze(text)
