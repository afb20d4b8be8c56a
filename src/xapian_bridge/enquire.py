"""Running queries against a database."""

from __future__ import annotations

import logging
from typing import Any

from xapian_bridge import native
from xapian_bridge.collect import collect_doc_ids
from xapian_bridge.database import Database
from xapian_bridge.errors import NativeOperationError
from xapian_bridge.models import DocumentId
from xapian_bridge.observability.tracing import native_operation
from xapian_bridge.query import Query
from xapian_bridge.resources import manage


logger = logging.getLogger(__name__)


class Enquire:
    """A query session over one database."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self._lib = database.lib
        self._handle = manage(self._lib.cx_enquire_new(database.handle.pointer), self._lib.cx_enquire_delete, "enquire")
        self._query: Query | None = None

    def set_query(self, query: Query) -> None:
        self._lib.cx_enquire_set_query(self._handle.pointer, query.handle.pointer)
        self._query = query

    def get_mset(self, first: int = 0, max_items: int | None = None) -> list[DocumentId]:
        """Return the ids of matching documents, best match first.

        ``max_items`` defaults to ``Settings.default_result_limit``.
        """
        if self._query is None:
            raise RuntimeError("set_query() must be called before get_mset()")
        native.to_c_uint(first, what="first")
        if max_items is None:
            from xapian_bridge.config import get_settings

            max_items = get_settings().default_result_limit
        native.to_c_uint(max_items, what="max_items")

        lib = self._lib
        attributes = {"xapian.first": first, "xapian.max_items": max_items}
        error = native.new_error_slot()
        with native_operation("enquire.get_mset", attributes):
            pointer = lib.cx_enquire_get_mset(self._handle.pointer, first, max_items, error)
            if not pointer:
                raise NativeOperationError(native.read_error(error), operation="get_mset", path=self.database.path)
            with manage(pointer, lib.cx_mset_delete, "mset") as mset:
                start = manage(lib.cx_mset_begin(mset.pointer), lib.cx_msetiterator_delete, "msetiterator")
                with start, manage(lib.cx_mset_end(mset.pointer), lib.cx_msetiterator_delete, "msetiterator") as end:
                    doc_ids = collect_doc_ids(lib, start, end)
        logger.debug("Query matched %d documents (first=%d, max_items=%d)", len(doc_ids), first, max_items)
        return doc_ids

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> Enquire:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def search(database: Database, query: Query, *, first: int = 0, limit: int | None = None) -> list[DocumentId]:
    """Run ``query`` against ``database`` and return matching document ids."""
    with Enquire(database) as enquire:
        enquire.set_query(query)
        return enquire.get_mset(first, limit)
