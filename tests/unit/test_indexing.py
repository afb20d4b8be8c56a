"""Unit tests for indexing text through the term generator."""

from prometheus_client import REGISTRY
import pytest

from xapian_bridge.document import Document
from xapian_bridge.errors import NativeConstructionError
from xapian_bridge.indexing import TermGenerator, index_text
from xapian_bridge.stemmer import Stemmer


def terms_of(document):
    return {term.term: list(term.positions) for term in document.get_terms()}


class TestIndexText:
    def test_unstemmed_words_get_consecutive_positions(self, fake_lib):
        with Document() as document:
            index_text(document, None, "The quick fox")
            assert terms_of(document) == {b"the": [0], b"quick": [1], b"fox": [2]}

        assert fake_lib.count("cx_stem_new_with_language") == 0
        assert fake_lib.count("cx_termgenerator_set_stemmer") == 0

    def test_stemmer_is_applied(self, fake_lib):
        with Document() as document:
            index_text(document, Stemmer.ENGLISH, "quickly jumping foxes")
            assert terms_of(document) == {b"quick": [0], b"jump": [1], b"fox": [2]}

    def test_transient_handles_are_released(self, fake_lib):
        with Document() as document:
            index_text(document, Stemmer.ENGLISH, "one two")

        assert fake_lib.live["termgenerator"] == 0
        assert fake_lib.live["stem"] == 0
        assert fake_lib.count("cx_termgenerator_delete") == 1
        assert fake_lib.count("cx_stem_delete") == 1

    def test_repeat_indexing_restarts_positions(self, fake_lib):
        with Document() as document:
            index_text(document, None, "cat")
            index_text(document, None, "cat dog")
            assert terms_of(document) == {b"cat": [0], b"dog": [1]}

    def test_empty_text_adds_nothing(self, fake_lib):
        with Document() as document:
            index_text(document, None, "")
            assert document.get_terms() == []

    def test_text_with_nul_is_rejected_and_cleans_up(self, fake_lib):
        with Document() as document, pytest.raises(ValueError, match="text contains a NUL byte"):
            index_text(document, Stemmer.ENGLISH, "a\x00b")

        assert fake_lib.live["termgenerator"] == 0
        assert fake_lib.live["stem"] == 0

    def test_indexing_is_counted_per_stemmer(self, fake_lib):
        labels = {"stemmer": "porter"}
        before = REGISTRY.get_sample_value("xapian_texts_indexed_total", labels) or 0.0
        with Document() as document:
            index_text(document, Stemmer.ENGLISH_PORTER, "counting")
        assert REGISTRY.get_sample_value("xapian_texts_indexed_total", labels) == before + 1


class TestDocumentIndexText:
    def test_explicit_stemmer(self, fake_lib):
        with Document() as document:
            document.index_text("running", Stemmer.ENGLISH)
            assert terms_of(document) == {b"runn": [0]}

    def test_configured_default_stemmer(self, fake_lib, monkeypatch):
        monkeypatch.setenv("XAPIAN_BRIDGE_DEFAULT_STEMMER", "english")
        with Document() as document:
            document.index_text("walked")
            assert terms_of(document) == {b"walk": [0]}

    def test_no_default_means_no_stemming(self, fake_lib):
        with Document() as document:
            document.index_text("walked")
            assert terms_of(document) == {b"walked": [0]}


class TestTermGenerator:
    def test_reusable_across_documents(self, fake_lib):
        with TermGenerator(Stemmer.ENGLISH) as generator, Document() as first, Document() as second:
            generator.index_text(first, "cats")
            generator.index_text(second, "dogs")
            assert terms_of(first) == {b"cat": [0]}
            assert terms_of(second) == {b"dog": [0]}

        assert fake_lib.live["termgenerator"] == 0
        assert fake_lib.live["stem"] == 0

    def test_failed_stemmer_releases_generator(self, fake_lib):
        fake_lib.cx_stem_new_with_language = lambda language: None

        with pytest.raises(NativeConstructionError):
            TermGenerator(Stemmer.FRENCH)

        assert fake_lib.live["termgenerator"] == 0
