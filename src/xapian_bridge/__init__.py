"""
Python bindings for the Xapian search engine over a small C shim.

This package exposes the engine's indexing and query primitives:
- document: postings, values and data on native documents
- indexing: text submission through the native term generator
- stemmer: the fixed table of stemming languages
- database / query / enquire: storage, query trees and result sets
- collect: draining native iterator pairs into Python lists
- codec: NUL-free escaping for binary payloads
"""

from xapian_bridge.codec import decode, encode
from xapian_bridge.collect import collect, iterate
from xapian_bridge.config import Settings, get_settings
from xapian_bridge.database import Database, DatabaseAction, WritableDatabase
from xapian_bridge.document import Document, add_posting, add_term, add_value, get_terms, get_values, new_document
from xapian_bridge.enquire import Enquire, search
from xapian_bridge.errors import (
    DecodeError,
    HandleReleasedError,
    LibraryLoadError,
    NativeConstructionError,
    NativeOperationError,
    XapianBridgeError,
)
from xapian_bridge.indexing import TermGenerator, index_text
from xapian_bridge.models import DocumentId, Term
from xapian_bridge.native import build_library, get_library, load_library, reset_library, set_library
from xapian_bridge.query import Query, QueryOp
from xapian_bridge.resources import NativeHandle
from xapian_bridge.stemmer import Stem, Stemmer, create_stemmer, resolve_language_id, stem_word


__all__ = [
    "Database",
    "DatabaseAction",
    "DecodeError",
    "Document",
    "DocumentId",
    "Enquire",
    "HandleReleasedError",
    "LibraryLoadError",
    "NativeConstructionError",
    "NativeOperationError",
    "NativeHandle",
    "Query",
    "QueryOp",
    "Settings",
    "Stem",
    "Stemmer",
    "Term",
    "TermGenerator",
    "WritableDatabase",
    "XapianBridgeError",
    "add_posting",
    "add_term",
    "add_value",
    "build_library",
    "collect",
    "create_stemmer",
    "decode",
    "encode",
    "get_library",
    "get_settings",
    "get_terms",
    "get_values",
    "index_text",
    "iterate",
    "load_library",
    "new_document",
    "reset_library",
    "resolve_language_id",
    "search",
    "set_library",
    "stem_word",
]
__version__ = "0.1.0"
