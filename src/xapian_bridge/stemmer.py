"""Stemming algorithms supported by the native engine."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any

from xapian_bridge import native
from xapian_bridge.resources import NativeHandle, manage


logger = logging.getLogger(__name__)


class Stemmer(Enum):
    """Closed set of stemming algorithms."""

    DANISH = "danish"
    DUTCH = "dutch"
    DUTCH_KRAAIJ_POHLMANN = "dutch_kraaij_pohlmann"
    ENGLISH = "english"
    ENGLISH_LOVINS = "english_lovins"
    ENGLISH_PORTER = "english_porter"
    FINNISH = "finnish"
    FRENCH = "french"
    GERMAN = "german"
    GERMAN2 = "german2"
    HUNGARIAN = "hungarian"
    ITALIAN = "italian"
    NORWEGIAN = "norwegian"
    PORTUGUESE = "portuguese"
    ROMANIAN = "romanian"
    RUSSIAN = "russian"
    SPANISH = "spanish"
    SWEDISH = "swedish"
    TURKISH = "turkish"

    @property
    def language_id(self) -> str:
        return resolve_language_id(self)

    @classmethod
    def from_name(cls, name: str) -> Stemmer:
        """Look up a stemmer by member name or native identifier.

        Matching ignores case and treats ``-`` and ``_`` alike, so
        ``"english-porter"``, ``"ENGLISH_PORTER"`` and ``"porter"`` all resolve
        to :attr:`ENGLISH_PORTER`.
        """
        normalized = name.strip().lower().replace("-", "_")
        for stemmer in cls:
            if normalized in (stemmer.value, _LANGUAGE_IDS[stemmer]):
                return stemmer
        available = sorted(stemmer.value for stemmer in cls)
        msg = f"Unknown stemmer '{name}'. Available: {available}"
        raise ValueError(msg)


_LANGUAGE_IDS: dict[Stemmer, str] = {
    Stemmer.DANISH: "danish",
    Stemmer.DUTCH: "dutch",
    Stemmer.DUTCH_KRAAIJ_POHLMANN: "kraaij_pohlmann",
    Stemmer.ENGLISH: "english",
    Stemmer.ENGLISH_LOVINS: "lovins",
    Stemmer.ENGLISH_PORTER: "porter",
    Stemmer.FINNISH: "finnish",
    Stemmer.FRENCH: "french",
    Stemmer.GERMAN: "german",
    Stemmer.GERMAN2: "german2",
    Stemmer.HUNGARIAN: "hungarian",
    Stemmer.ITALIAN: "italian",
    Stemmer.NORWEGIAN: "norwegian",
    Stemmer.PORTUGUESE: "portuguese",
    Stemmer.ROMANIAN: "romanian",
    Stemmer.RUSSIAN: "russian",
    Stemmer.SPANISH: "spanish",
    Stemmer.SWEDISH: "swedish",
    Stemmer.TURKISH: "turkish",
}


def resolve_language_id(stemmer: Stemmer) -> str:
    """Return the identifier the native stemmer constructor expects."""
    return _LANGUAGE_IDS[stemmer]


class Stem:
    """A native stemmer instance."""

    def __init__(self, stemmer: Stemmer, *, lib: Any | None = None) -> None:
        self._lib = native.resolve(lib)
        self.stemmer = stemmer
        language = resolve_language_id(stemmer).encode("ascii")
        self._handle: NativeHandle = manage(
            self._lib.cx_stem_new_with_language(language), self._lib.cx_stem_delete, "stem"
        )

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    def stem_word(self, word: str | bytes) -> bytes:
        """Stem a single word."""
        stemmed = self._lib.cx_stem_word(self._handle.pointer, native.to_c_string(word, what="word"))
        return stemmed or b""

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> Stem:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Stem {resolve_language_id(self.stemmer)}>"


def create_stemmer(stemmer: Stemmer, *, lib: Any | None = None) -> Stem:
    """Construct a managed native stemmer for ``stemmer``."""
    logger.debug("Creating %s stemmer", resolve_language_id(stemmer))
    return Stem(stemmer, lib=lib)


def stem_word(stem: Stem, word: str | bytes) -> bytes:
    """Apply ``stem`` to a single word."""
    return stem.stem_word(word)
