"""Exception hierarchy for the Xapian binding layer."""

from __future__ import annotations


class XapianBridgeError(Exception):
    """Base class for recoverable failures reported by the binding layer."""


class LibraryLoadError(XapianBridgeError):
    """Raised when the native shared library cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to load native library '{path}': {reason}")


class NativeConstructionError(XapianBridgeError):
    """Raised when a native constructor returns NULL.

    ``message`` carries the text reported by the native library, when any.
    """

    def __init__(self, message: str, *, kind: str = "handle", path: str | None = None) -> None:
        self.message = message
        self.kind = kind
        self.path = path
        detail = f"Failed to create native {kind}"
        if path is not None:
            detail += f" for '{path}'"
        super().__init__(f"{detail}: {message}")


class DecodeError(XapianBridgeError, ValueError):
    """Raised when an escaped payload is not a valid encoder output."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.offset = offset
        super().__init__(message)


class HandleReleasedError(RuntimeError):
    """Raised when a native handle is used after it has been released.

    This signals a programming error in the caller, not a runtime condition
    the library recovers from.
    """


class NativeOperationError(XapianBridgeError):
    """Raised when a native call reports failure through its error slot."""

    def __init__(self, message: str, *, operation: str, path: str | None = None) -> None:
        self.message = message
        self.operation = operation
        self.path = path
        detail = f"Native {operation} failed"
        if path is not None:
            detail += f" for '{path}'"
        super().__init__(f"{detail}: {message}")
