"""Feeding raw text through the native term generator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from xapian_bridge import native
from xapian_bridge.observability.metrics import TEXTS_INDEXED
from xapian_bridge.observability.tracing import native_operation
from xapian_bridge.resources import NativeHandle, manage
from xapian_bridge.stemmer import Stem, Stemmer, create_stemmer, resolve_language_id


if TYPE_CHECKING:
    from xapian_bridge.document import Document

logger = logging.getLogger(__name__)

INDEX_WEIGHT = 1
INDEX_PREFIX = b""


class TermGenerator:
    """A native term generator, optionally with a stemmer attached.

    The generator owns the stemmer it creates and releases both on close.
    """

    def __init__(self, stemmer: Stemmer | None = None, *, lib: Any | None = None) -> None:
        self._lib = native.resolve(lib)
        self.stemmer = stemmer
        self._handle: NativeHandle = manage(
            self._lib.cx_termgenerator_new(), self._lib.cx_termgenerator_delete, "termgenerator"
        )
        self._stem: Stem | None = None
        if stemmer is not None:
            try:
                self._stem = create_stemmer(stemmer, lib=self._lib)
                self._lib.cx_termgenerator_set_stemmer(self._handle.pointer, self._stem.handle.pointer)
            except Exception:
                self.close()
                raise

    def index_text(self, document: Document, text: str | bytes) -> None:
        """Add postings for ``text`` to ``document``."""
        self._lib.cx_termgenerator_set_document(self._handle.pointer, document.handle.pointer)
        self._lib.cx_termgenerator_index_text(
            self._handle.pointer, native.to_c_string(text, what="text"), INDEX_WEIGHT, INDEX_PREFIX
        )

    def close(self) -> None:
        if self._stem is not None:
            self._stem.close()
        self._handle.release()

    def __enter__(self) -> TermGenerator:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def index_text(document: Document, stemmer: Stemmer | None, text: str | bytes, *, lib: Any | None = None) -> None:
    """Tokenize, optionally stem, and index ``text`` into ``document``.

    A transient term generator (and stemmer, when given) is created for the
    call and released before returning.
    """
    lib = document.lib if lib is None else lib
    language = resolve_language_id(stemmer) if stemmer is not None else "none"
    size = len(native.to_bytes(text))
    logger.debug("Indexing %d bytes of text (stemmer=%s)", size, language)
    with (
        native_operation("index_text", {"xapian.stemmer": language, "xapian.text_length": size}),
        TermGenerator(stemmer, lib=lib) as generator,
    ):
        generator.index_text(document, text)
    TEXTS_INDEXED.labels(stemmer=language).inc()
