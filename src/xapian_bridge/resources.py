"""Ownership of opaque native handles.

A :class:`NativeHandle` pairs a pointer returned by the C shim with the shim
function that frees it. The release runs exactly once: explicitly through
:meth:`NativeHandle.release` or the context manager protocol, or implicitly
when the last Python reference goes away (``weakref.finalize``).
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any
import weakref

from xapian_bridge.errors import HandleReleasedError, NativeConstructionError
from xapian_bridge.observability.metrics import NATIVE_HANDLES_ACQUIRED, NATIVE_HANDLES_RELEASED


logger = logging.getLogger(__name__)


def _release_native(release: Callable[[Any], None], pointer: Any, kind: str) -> None:
    release(pointer)
    NATIVE_HANDLES_RELEASED.labels(kind=kind).inc()
    logger.debug("Released native %s", kind)


class NativeHandle:
    """Owning wrapper around one native pointer."""

    __slots__ = ("__weakref__", "_finalizer", "_pointer", "kind")

    def __init__(self, pointer: Any, release: Callable[[Any], None], kind: str = "handle") -> None:
        if pointer is None or pointer == 0:
            raise NativeConstructionError("native constructor returned NULL", kind=kind)
        self._pointer = pointer
        self.kind = kind
        self._finalizer = weakref.finalize(self, _release_native, release, pointer, kind)
        NATIVE_HANDLES_ACQUIRED.labels(kind=kind).inc()

    @property
    def pointer(self) -> Any:
        """The raw pointer; only valid while the handle is alive."""
        if not self._finalizer.alive:
            raise HandleReleasedError(f"native {self.kind} used after release")
        return self._pointer

    @property
    def released(self) -> bool:
        return not self._finalizer.alive

    def release(self) -> None:
        """Release the native resource. Subsequent calls do nothing."""
        self._finalizer()

    def __enter__(self) -> NativeHandle:
        return self

    def __exit__(self, *_: object) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"<NativeHandle {self.kind} {state}>"


def manage(pointer: Any, release: Callable[[Any], None], kind: str) -> NativeHandle:
    """Wrap a freshly created native pointer."""
    return NativeHandle(pointer, release, kind)
