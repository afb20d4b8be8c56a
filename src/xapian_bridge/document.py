"""Documents: postings, values and data built on a native document handle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from xapian_bridge import codec, native
from xapian_bridge.collect import collect_terms, collect_values
from xapian_bridge.errors import DecodeError
from xapian_bridge.models import Term
from xapian_bridge.resources import NativeHandle, manage


if TYPE_CHECKING:
    from xapian_bridge.stemmer import Stemmer

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1
# Xapian::BAD_VALUENO
BAD_VALUE_NUMBER = native.C_UINT_MAX


def _term_bytes(term: str | bytes) -> bytes:
    data = native.to_c_string(term, what="term")
    if not data:
        raise ValueError("term must not be empty")
    return data


class Document:
    """A document under construction, or one fetched from a database.

    The caller owns the document until it is added to a writable database,
    which stores its own copy; closing the Python object afterwards does not
    affect the stored document.

    Value payloads and the data blob may contain arbitrary bytes. They are
    escaped with :mod:`xapian_bridge.codec` on the way in and unescaped on the
    way out. Terms travel unescaped and must not contain NUL bytes.
    """

    def __init__(self, *, lib: Any | None = None, handle: NativeHandle | None = None) -> None:
        self._lib = native.resolve(lib)
        if handle is None:
            handle = manage(self._lib.cx_document_new(), self._lib.cx_document_delete, "document")
        self._handle = handle

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    @property
    def lib(self) -> Any:
        return self._lib

    # Building

    def add_posting(self, term: str | bytes, position: int) -> None:
        """Index ``term`` at ``position``."""
        position = native.to_c_uint(position, what="position")
        self._lib.cx_document_add_posting(self._handle.pointer, _term_bytes(term), position, DEFAULT_WEIGHT)

    def add_term(self, term: str | bytes) -> None:
        """Index ``term`` without positional information."""
        self._lib.cx_document_add_term(self._handle.pointer, _term_bytes(term), DEFAULT_WEIGHT)

    def add_value(self, value_number: int, value: str | bytes) -> None:
        """Store ``value`` in slot ``value_number``, replacing any previous value."""
        value_number = native.to_c_uint(value_number, what="value number")
        if value_number == BAD_VALUE_NUMBER:
            raise ValueError(f"value number {BAD_VALUE_NUMBER} is reserved by the engine")
        escaped = codec.encode(native.to_bytes(value))
        self._lib.cx_document_add_value(self._handle.pointer, value_number, escaped)

    def set_data(self, data: str | bytes) -> None:
        """Attach the opaque data blob."""
        self._lib.cx_document_set_data(self._handle.pointer, codec.encode(native.to_bytes(data)))

    def index_text(self, text: str | bytes, stemmer: Stemmer | None = None) -> None:
        """Tokenize ``text`` and add the resulting postings to this document.

        Without an explicit ``stemmer`` the configured default stemmer is used,
        if any. Call :func:`xapian_bridge.indexing.index_text` directly to index
        without stemming regardless of configuration.
        """
        from xapian_bridge.config import get_settings
        from xapian_bridge.indexing import index_text

        if stemmer is None:
            stemmer = get_settings().get_default_stemmer()
        index_text(self, stemmer, text, lib=self._lib)

    # Reading

    def get_data(self) -> bytes:
        """Return the data blob."""
        return codec.decode(self._lib.cx_document_get_data(self._handle.pointer) or b"")

    def get_values(self) -> dict[int, bytes]:
        """Return the mapping of value numbers to values."""
        lib = self._lib
        pointer = self._handle.pointer
        start = manage(lib.cx_document_values_begin(pointer), lib.cx_valueiterator_delete, "valueiterator")
        with start, manage(lib.cx_document_values_end(pointer), lib.cx_valueiterator_delete, "valueiterator") as end:
            raw = collect_values(lib, start, end)
        values: dict[int, bytes] = {}
        for value_number, payload in raw:
            try:
                values[value_number] = codec.decode(payload)
            except DecodeError as exc:
                raise DecodeError(f"value slot {value_number}: {exc}", offset=exc.offset) from exc
        return values

    def get_terms(self) -> list[Term]:
        """Return the document's terms, in native termlist order, with positions."""
        lib = self._lib
        pointer = self._handle.pointer
        start = manage(lib.cx_document_termlist_begin(pointer), lib.cx_termiterator_delete, "termiterator")
        with start, manage(lib.cx_document_termlist_end(pointer), lib.cx_termiterator_delete, "termiterator") as end:
            return collect_terms(lib, start, end)

    # Lifetime

    def close(self) -> None:
        self._handle.release()

    @property
    def closed(self) -> bool:
        return self._handle.released

    def __enter__(self) -> Document:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Document {state}>"


def new_document(*, lib: Any | None = None) -> Document:
    return Document(lib=lib)


def add_posting(document: Document, term: str | bytes, position: int) -> None:
    document.add_posting(term, position)


def add_term(document: Document, term: str | bytes) -> None:
    document.add_term(term)


def add_value(document: Document, value_number: int, value: str | bytes) -> None:
    document.add_value(value_number, value)


def get_values(document: Document) -> dict[int, bytes]:
    return document.get_values()


def get_terms(document: Document) -> list[Term]:
    return document.get_terms()
