"""Read-only and writable databases."""

from __future__ import annotations

from enum import IntEnum
import logging
import os
from typing import Any

from xapian_bridge import native
from xapian_bridge.document import Document
from xapian_bridge.errors import NativeConstructionError, NativeOperationError
from xapian_bridge.models import DocumentId
from xapian_bridge.observability.metrics import DOCUMENTS_ADDED
from xapian_bridge.observability.tracing import native_operation
from xapian_bridge.resources import NativeHandle, manage


logger = logging.getLogger(__name__)


class DatabaseAction(IntEnum):
    """How a writable database is opened.

    Values are the shim's ``CX_DB_*`` action codes, which it maps onto the
    engine's ``DB_*`` flags.
    """

    CREATE_OR_OPEN = 1
    CREATE = 2
    CREATE_OR_OVERWRITE = 3
    OPEN = 4


class Database:
    """A read-only database."""

    kind = "database"

    def __init__(self, path: str | os.PathLike[str], *, lib: Any | None = None) -> None:
        self._lib = native.resolve(lib)
        self.path = os.fspath(path)
        with native_operation("database.open", {"xapian.path": self.path, "xapian.kind": self.kind}):
            self._handle = self._open()
        logger.info("Opened %s at %s", self.kind, self.path)

    def _open(self) -> NativeHandle:
        error = native.new_error_slot()
        pointer = self._lib.cx_database_new(native.to_c_string(self.path, what="path"), error)
        return self._adopt(pointer, error)

    def _adopt(self, pointer: Any, error: Any) -> NativeHandle:
        if not pointer:
            message = native.read_error(error)
            logger.error("Failed to open %s at %s: %s", self.kind, self.path, message)
            raise NativeConstructionError(message, kind=self.kind, path=self.path)
        return manage(pointer, self._lib.cx_database_delete, self.kind)

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    @property
    def lib(self) -> Any:
        return self._lib

    def doc_count(self) -> int:
        """Number of documents in the database."""
        return int(self._lib.cx_database_get_doccount(self._handle.pointer))

    def get_document(self, doc_id: DocumentId | int) -> Document:
        """Fetch a stored document. The returned document is owned by the caller."""
        error = native.new_error_slot()
        doc_id = native.to_c_uint(int(doc_id), what="document id")
        pointer = self._lib.cx_database_get_document(self._handle.pointer, doc_id, error)
        if not pointer:
            raise NativeConstructionError(native.read_error(error), kind="document", path=self.path)
        handle = manage(pointer, self._lib.cx_document_delete, "document")
        return Document(lib=self._lib, handle=handle)

    def close(self) -> None:
        self._handle.release()

    @property
    def closed(self) -> bool:
        return self._handle.released

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path!r}>"


class WritableDatabase(Database):
    """A database that accepts new documents."""

    kind = "writable_database"

    def __init__(
        self,
        path: str | os.PathLike[str],
        action: DatabaseAction | None = None,
        *,
        lib: Any | None = None,
    ) -> None:
        if action is None:
            from xapian_bridge.config import get_settings

            action = get_settings().get_writable_action()
        self.action = DatabaseAction(action)
        super().__init__(path, lib=lib)

    def _open(self) -> NativeHandle:
        error = native.new_error_slot()
        pointer = self._lib.cx_writable_database_new(
            native.to_c_string(self.path, what="path"), int(self.action), error
        )
        return self._adopt(pointer, error)

    def add_document(self, document: Document) -> DocumentId:
        """Store a copy of ``document`` and return its assigned id."""
        error = native.new_error_slot()
        with native_operation("database.add_document", {"xapian.path": self.path}):
            doc_id = int(
                self._lib.cx_writable_database_add_document(self._handle.pointer, document.handle.pointer, error)
            )
            if doc_id == 0:
                raise NativeOperationError(native.read_error(error), operation="add_document", path=self.path)
        DOCUMENTS_ADDED.inc()
        logger.debug("Added document %d to %s", doc_id, self.path)
        return DocumentId(doc_id)

    def commit(self) -> None:
        """Flush pending changes to disk."""
        error = native.new_error_slot()
        with native_operation("database.commit", {"xapian.path": self.path}):
            if self._lib.cx_writable_database_commit(self._handle.pointer, error) != 0:
                raise NativeOperationError(native.read_error(error), operation="commit", path=self.path)
