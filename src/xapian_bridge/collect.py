"""Draining native begin/end iterator pairs into Python lists.

Every iterator kind of the C shim follows the same protocol: a ``begin`` and
an ``end`` handle, plus three functions

* ``is_end(pos, end)`` - whether ``pos`` has reached ``end``
* ``get(pos)`` - the element under ``pos``, without moving it
* ``next(pos)`` - advance ``pos`` by one element (mutates native state)

:func:`iterate` turns such a pair into a generator and :func:`collect` forces
it into a list. The specialised collectors below are eager: every element,
including the nested position lists of terms, is copied into Python objects
before the native iterators are released.
"""

from __future__ import annotations

from array import array
from collections.abc import Callable, Iterator
import logging
from typing import Any, TypeVar

from xapian_bridge.models import DocumentId, Term
from xapian_bridge.resources import NativeHandle, manage


logger = logging.getLogger(__name__)

T = TypeVar("T")


def iterate(
    advance: Callable[[Any], object],
    dereference: Callable[[Any], T],
    is_done: Callable[[Any, Any], object],
    start: NativeHandle,
    end: NativeHandle,
) -> Iterator[T]:
    """Yield the elements between ``start`` and ``end`` in native order.

    Releasing ``start`` and ``end`` is left to the caller.
    """
    while not is_done(start.pointer, end.pointer):
        element = dereference(start.pointer)
        advance(start.pointer)
        yield element


def collect(
    advance: Callable[[Any], object],
    dereference: Callable[[Any], T],
    is_done: Callable[[Any, Any], object],
    start: NativeHandle,
    end: NativeHandle,
) -> list[T]:
    """Collect every element between ``start`` and ``end``.

    Order matches the native iteration order exactly; nothing is reordered or
    deduplicated. An iterator pair that never reports done never returns.
    """
    return list(iterate(advance, dereference, is_done, start, end))


def collect_positions(lib: Any, start: NativeHandle, end: NativeHandle) -> array:
    return array(
        "I",
        collect(
            lib.cx_positioniterator_next,
            lib.cx_positioniterator_get,
            lib.cx_positioniterator_is_end,
            start,
            end,
        ),
    )


def collect_terms(lib: Any, start: NativeHandle, end: NativeHandle) -> list[Term]:
    """Collect terms with their positions.

    Position iterators are only opened for terms that report at least one
    position.
    """

    def get_term(pointer: Any) -> Term:
        term = lib.cx_termiterator_get(pointer) or b""
        if lib.cx_termiterator_positionlist_count(pointer) <= 0:
            return Term(term)
        release = lib.cx_positioniterator_delete
        pos_start = manage(lib.cx_termiterator_positionlist_begin(pointer), release, "positioniterator")
        with pos_start, manage(lib.cx_termiterator_positionlist_end(pointer), release, "positioniterator") as pos_end:
            return Term(term, collect_positions(lib, pos_start, pos_end))

    return collect(lib.cx_termiterator_next, get_term, lib.cx_termiterator_is_end, start, end)


def collect_values(lib: Any, start: NativeHandle, end: NativeHandle) -> list[tuple[int, bytes]]:
    """Collect ``(value_number, payload)`` pairs. Payloads are returned as stored."""

    def get_value(pointer: Any) -> tuple[int, bytes]:
        payload = lib.cx_valueiterator_get(pointer) or b""
        return int(lib.cx_valueiterator_get_valueno(pointer)), payload

    return collect(lib.cx_valueiterator_next, get_value, lib.cx_valueiterator_is_end, start, end)


def collect_doc_ids(lib: Any, start: NativeHandle, end: NativeHandle) -> list[DocumentId]:
    return collect(
        lib.cx_msetiterator_next,
        lambda pointer: DocumentId(int(lib.cx_msetiterator_get(pointer))),
        lib.cx_msetiterator_is_end,
        start,
        end,
    )
