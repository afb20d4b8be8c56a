"""Unit tests for building and reading documents."""

from array import array

import pytest

from xapian_bridge.document import (
    Document,
    add_posting,
    add_term,
    add_value,
    get_terms,
    get_values,
    new_document,
)
from xapian_bridge.errors import DecodeError, HandleReleasedError
from xapian_bridge.models import Term


class TestBuildAndRead:
    def test_terms_positions_and_values(self, fake_lib):
        document = new_document()
        add_term(document, "cat")
        add_posting(document, "dog", 3)
        add_value(document, 1, b"hello\x00world")

        assert get_terms(document) == [Term(b"cat", array("I")), Term(b"dog", array("I", [3]))]
        assert get_values(document) == {1: b"hello\x00world"}

        document.close()
        assert fake_lib.live["document"] == 0
        assert fake_lib.live["termiterator"] == 0
        assert fake_lib.live["valueiterator"] == 0
        assert fake_lib.live["positioniterator"] == 0

    def test_value_is_stored_escaped(self, fake_lib):
        with Document() as document:
            document.add_value(1, b"hello\x00world")
            stored = document.handle.pointer.values[1]

        assert stored == b"helloz0world"

    def test_value_overwrites_previous(self, fake_lib):
        with Document() as document:
            document.add_value(5, "first")
            document.add_value(5, "second")
            assert document.get_values() == {5: b"second"}

    def test_empty_document(self, fake_lib):
        with Document() as document:
            assert document.get_terms() == []
            assert document.get_values() == {}
            assert document.get_data() == b""

    def test_repeated_postings_accumulate_positions(self, fake_lib):
        with Document() as document:
            document.add_posting(b"fox", 7)
            document.add_posting(b"fox", 2)
            document.add_posting(b"fox", 7)

            (term,) = document.get_terms()

        assert term.term == b"fox"
        assert list(term.positions) == [2, 7]
        assert term.frequency == 2

    def test_data_round_trips_binary(self, fake_lib):
        payload = b'{"title": "z\x00z"}'
        with Document() as document:
            document.set_data(payload)
            assert document.get_data() == payload

    def test_str_input_is_utf8(self, fake_lib):
        with Document() as document:
            document.add_term("café")
            document.add_value(0, "naïve")
            assert document.get_terms() == [Term("café".encode())]
            assert document.get_values() == {0: "naïve".encode()}


class TestValidation:
    def test_nul_in_term_is_rejected(self, fake_lib):
        with Document() as document:
            with pytest.raises(ValueError, match="term contains a NUL byte"):
                document.add_term(b"ca\x00t")
            with pytest.raises(ValueError, match="NUL"):
                document.add_posting(b"ca\x00t", 0)
            assert document.get_terms() == []

    def test_negative_position_is_rejected(self, fake_lib):
        with Document() as document, pytest.raises(ValueError, match="position"):
            document.add_posting("cat", -1)

    def test_negative_value_number_is_rejected(self, fake_lib):
        with Document() as document, pytest.raises(ValueError, match="value number"):
            document.add_value(-1, "x")

    @pytest.mark.parametrize("position", [2**32, 2**32 + 1, 2**64])
    def test_position_above_unsigned_range_is_rejected(self, fake_lib, position):
        with Document() as document:
            with pytest.raises(ValueError, match="position must not exceed 4294967295"):
                document.add_posting("cat", position)
            assert document.get_terms() == []
        assert fake_lib.count("cx_document_add_posting") == 0

    def test_value_number_above_unsigned_range_is_rejected(self, fake_lib):
        with Document() as document:
            document.add_value(1, b"kept")
            with pytest.raises(ValueError, match="value number must not exceed"):
                document.add_value(2**32 + 1, b"wrapped")
            assert document.get_values() == {1: b"kept"}

    def test_reserved_value_number_is_rejected(self, fake_lib):
        with Document() as document, pytest.raises(ValueError, match="reserved"):
            document.add_value(2**32 - 1, b"x")
        assert fake_lib.count("cx_document_add_value") == 0

    @pytest.mark.parametrize("term", ["", b""])
    def test_empty_term_is_rejected(self, fake_lib, term):
        with Document() as document:
            with pytest.raises(ValueError, match="term must not be empty"):
                document.add_term(term)
            with pytest.raises(ValueError, match="term must not be empty"):
                document.add_posting(term, 1)
            assert document.get_terms() == []

    def test_largest_unsigned_position_is_accepted(self, fake_lib):
        with Document() as document:
            document.add_posting("cat", 2**32 - 1)
            assert document.get_terms() == [Term(b"cat", array("I", [2**32 - 1]))]

    def test_corrupt_value_raises_and_releases_iterators(self, fake_lib):
        with Document() as document:
            document.add_value(1, b"fine")
            document.handle.pointer.values[2] = b"bad z"

            with pytest.raises(DecodeError, match="value slot 2") as excinfo:
                document.get_values()

        assert excinfo.value.offset == 4
        assert fake_lib.live["valueiterator"] == 0

    def test_corrupt_data_raises(self, fake_lib):
        with Document() as document:
            document.handle.pointer.data = b"zq"
            with pytest.raises(DecodeError):
                document.get_data()


class TestLifetime:
    def test_use_after_close_is_a_programming_error(self, fake_lib):
        document = Document()
        document.close()

        assert document.closed
        with pytest.raises(HandleReleasedError):
            document.add_term("cat")
        with pytest.raises(HandleReleasedError):
            document.get_terms()

    def test_close_is_idempotent(self, fake_lib):
        document = Document()
        document.close()
        document.close()

        assert fake_lib.count("cx_document_delete") == 1
        assert repr(document) == "<Document closed>"

    def test_explicit_library_takes_precedence(self, fake_lib):
        from tests.fixtures.fake_native import FakeXapianLibrary

        other = FakeXapianLibrary()
        with Document(lib=other) as document:
            document.add_term("cat")

        assert other.live["document"] == 0
        assert other.count("cx_document_add_term") == 1
        assert fake_lib.count("cx_document_new") == 0
