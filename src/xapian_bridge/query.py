"""Boolean query trees."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from xapian_bridge import native
from xapian_bridge.resources import NativeHandle, manage


class QueryOp(IntEnum):
    """Binary query operators (values match the engine's ``Query::op``)."""

    AND = 0
    OR = 1
    AND_NOT = 2
    XOR = 3
    AND_MAYBE = 4
    FILTER = 5
    NEAR = 6
    PHRASE = 7
    ELITE_SET = 10
    SYNONYM = 13


class Query:
    """A native query.

    Combining queries copies the operands natively, so each ``Query`` owns its
    handle independently and operands may be closed after combination.
    """

    def __init__(self, handle: NativeHandle, *, lib: Any) -> None:
        self._handle = handle
        self._lib = lib

    @classmethod
    def term(cls, term: str | bytes, *, lib: Any | None = None) -> Query:
        """A query matching documents indexed with ``term``."""
        lib = native.resolve(lib)
        pointer = lib.cx_query_new(native.to_c_string(term, what="term"))
        return cls(manage(pointer, lib.cx_query_delete, "query"), lib=lib)

    @classmethod
    def combine(cls, op: QueryOp, left: Query, right: Query) -> Query:
        lib = left._lib
        pointer = lib.cx_query_combine(int(QueryOp(op)), left.handle.pointer, right.handle.pointer)
        return cls(manage(pointer, lib.cx_query_delete, "query"), lib=lib)

    def __and__(self, other: Query) -> Query:
        return Query.combine(QueryOp.AND, self, other)

    def __or__(self, other: Query) -> Query:
        return Query.combine(QueryOp.OR, self, other)

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    def describe(self) -> str:
        """The engine's textual description of the query tree."""
        description = self._lib.cx_query_describe(self._handle.pointer) or b""
        return description.decode("utf-8", errors="replace")

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> Query:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._handle.released:
            return "<Query released>"
        return f"<{self.describe()}>"
