"""ctypes bindings to the ``cx_*`` C shim around the Xapian C++ library.

The shim exposes opaque ``void*`` handles for databases, documents, queries,
enquire sessions, stemmers, term generators and the four iterator kinds
(term, position, value and result-set). Strings cross the boundary as
NUL-terminated ``const char*``; see :mod:`xapian_bridge.codec` for payloads
that may contain NUL bytes.

Only this module touches ``ctypes`` directly. Everything above it talks to a
library object exposing the ``cx_*`` callables, which is either the loaded
shared object or an in-process stand-in installed with :func:`set_library`.

The shim source ships in ``csrc/`` (``cxapian.h`` declares the ABI bound by
``SIGNATURES``); :func:`build_library` compiles it against the installed
Xapian when no prebuilt library is available.
"""

from __future__ import annotations

import ctypes
from ctypes import POINTER, c_bool, c_char_p, c_int, c_uint, c_void_p
import logging
import os
from pathlib import Path
import shlex
import subprocess
from typing import Any

from xapian_bridge.errors import LibraryLoadError


logger = logging.getLogger(__name__)

_ERROR_OUT = POINTER(c_char_p)
C_UINT_MAX = 0xFFFFFFFF

SHIM_SOURCE_DIR = Path(__file__).with_name("csrc")
SHIM_SOURCE = SHIM_SOURCE_DIR / "cxapian.cc"
BUNDLED_LIBRARY = SHIM_SOURCE_DIR / "libcxapian.so"

# symbol -> (argtypes, restype)
SIGNATURES: dict[str, tuple[list[Any], Any]] = {
    # Databases
    "cx_database_new": ([c_char_p, _ERROR_OUT], c_void_p),
    "cx_writable_database_new": ([c_char_p, c_int, _ERROR_OUT], c_void_p),
    "cx_writable_database_add_document": ([c_void_p, c_void_p, _ERROR_OUT], c_uint),
    "cx_writable_database_commit": ([c_void_p, _ERROR_OUT], c_int),
    "cx_database_get_document": ([c_void_p, c_uint, _ERROR_OUT], c_void_p),
    "cx_database_get_doccount": ([c_void_p], c_uint),
    "cx_database_delete": ([c_void_p], None),
    # Documents
    "cx_document_new": ([], c_void_p),
    "cx_document_delete": ([c_void_p], None),
    "cx_document_set_data": ([c_void_p, c_char_p], None),
    "cx_document_get_data": ([c_void_p], c_char_p),
    "cx_document_add_posting": ([c_void_p, c_char_p, c_uint, c_uint], None),
    "cx_document_add_term": ([c_void_p, c_char_p, c_uint], None),
    "cx_document_add_value": ([c_void_p, c_uint, c_char_p], None),
    "cx_document_termlist_begin": ([c_void_p], c_void_p),
    "cx_document_termlist_end": ([c_void_p], c_void_p),
    "cx_document_values_begin": ([c_void_p], c_void_p),
    "cx_document_values_end": ([c_void_p], c_void_p),
    # Term iterators
    "cx_termiterator_next": ([c_void_p], None),
    "cx_termiterator_get": ([c_void_p], c_char_p),
    "cx_termiterator_is_end": ([c_void_p, c_void_p], c_bool),
    "cx_termiterator_positionlist_count": ([c_void_p], c_uint),
    "cx_termiterator_positionlist_begin": ([c_void_p], c_void_p),
    "cx_termiterator_positionlist_end": ([c_void_p], c_void_p),
    "cx_termiterator_delete": ([c_void_p], None),
    # Position iterators
    "cx_positioniterator_next": ([c_void_p], None),
    "cx_positioniterator_get": ([c_void_p], c_uint),
    "cx_positioniterator_is_end": ([c_void_p, c_void_p], c_bool),
    "cx_positioniterator_delete": ([c_void_p], None),
    # Value iterators
    "cx_valueiterator_next": ([c_void_p], None),
    "cx_valueiterator_get": ([c_void_p], c_char_p),
    "cx_valueiterator_get_valueno": ([c_void_p], c_uint),
    "cx_valueiterator_is_end": ([c_void_p, c_void_p], c_bool),
    "cx_valueiterator_delete": ([c_void_p], None),
    # Queries
    "cx_query_new": ([c_char_p], c_void_p),
    "cx_query_combine": ([c_int, c_void_p, c_void_p], c_void_p),
    "cx_query_describe": ([c_void_p], c_char_p),
    "cx_query_delete": ([c_void_p], None),
    # Enquire sessions and result sets
    "cx_enquire_new": ([c_void_p], c_void_p),
    "cx_enquire_set_query": ([c_void_p, c_void_p], None),
    "cx_enquire_get_mset": ([c_void_p, c_uint, c_uint, _ERROR_OUT], c_void_p),
    "cx_enquire_delete": ([c_void_p], None),
    "cx_mset_begin": ([c_void_p], c_void_p),
    "cx_mset_end": ([c_void_p], c_void_p),
    "cx_mset_delete": ([c_void_p], None),
    "cx_msetiterator_next": ([c_void_p], None),
    "cx_msetiterator_get": ([c_void_p], c_uint),
    "cx_msetiterator_is_end": ([c_void_p, c_void_p], c_bool),
    "cx_msetiterator_delete": ([c_void_p], None),
    # Stemming and term generation
    "cx_stem_new_with_language": ([c_char_p], c_void_p),
    "cx_stem_word": ([c_void_p, c_char_p], c_char_p),
    "cx_stem_delete": ([c_void_p], None),
    "cx_termgenerator_new": ([], c_void_p),
    "cx_termgenerator_set_stemmer": ([c_void_p, c_void_p], None),
    "cx_termgenerator_set_document": ([c_void_p, c_void_p], None),
    "cx_termgenerator_index_text": ([c_void_p, c_char_p, c_uint, c_char_p], None),
    "cx_termgenerator_delete": ([c_void_p], None),
}

_library_holder: dict[str, Any] = {"lib": None}


def bind_signatures(cdll: Any) -> Any:
    """Declare argument and return types for every ``cx_*`` symbol on ``cdll``."""
    missing: list[str] = []
    for symbol, (argtypes, restype) in SIGNATURES.items():
        try:
            function = getattr(cdll, symbol)
        except AttributeError:
            missing.append(symbol)
            continue
        function.argtypes = argtypes
        function.restype = restype
    if missing:
        raise LibraryLoadError(getattr(cdll, "_name", repr(cdll)), f"missing symbols: {', '.join(missing)}")
    return cdll


def load_library(path: str) -> ctypes.CDLL:
    """Load the shared object at ``path`` and bind its signatures."""
    try:
        cdll = ctypes.CDLL(path)
    except OSError as exc:
        raise LibraryLoadError(path, str(exc)) from exc
    logger.info("Loaded native Xapian shim from %s", path)
    return bind_signatures(cdll)


def _xapian_config(flag: str) -> list[str]:
    try:
        completed = subprocess.run(["xapian-config", flag], capture_output=True, check=True, text=True)
    except FileNotFoundError as exc:
        raise LibraryLoadError(str(BUNDLED_LIBRARY), "xapian-config not found (Xapian development files)") from exc
    except subprocess.CalledProcessError as exc:
        raise LibraryLoadError(str(BUNDLED_LIBRARY), f"xapian-config {flag} failed: {exc.stderr.strip()}") from exc
    return shlex.split(completed.stdout)


def build_library(output: str | os.PathLike[str] = BUNDLED_LIBRARY, *, compiler: str | None = None) -> ctypes.CDLL:
    """Compile the bundled C shim against the installed Xapian and load it.

    Compiler and linker flags come from ``xapian-config``. The C++ compiler is
    ``compiler``, else ``$CXX``, else ``c++``.
    """
    output = os.fspath(output)
    compiler = compiler or os.environ.get("CXX", "c++")
    command = [
        compiler,
        "-O2",
        "-fPIC",
        "-shared",
        "-std=c++14",
        *_xapian_config("--cxxflags"),
        f"-I{SHIM_SOURCE_DIR}",
        "-o",
        output,
        str(SHIM_SOURCE),
        *_xapian_config("--libs"),
    ]
    logger.info("Building native Xapian shim: %s", shlex.join(command))
    try:
        subprocess.run(command, capture_output=True, check=True, text=True)
    except FileNotFoundError as exc:
        raise LibraryLoadError(output, f"compiler '{compiler}' not found") from exc
    except subprocess.CalledProcessError as exc:
        raise LibraryLoadError(output, f"compilation failed: {exc.stderr.strip()}") from exc
    return load_library(output)


def get_library() -> Any:
    """Return the process-wide native library, loading it on first use.

    ``Settings.library_path`` names the shared object to load. When it is unset
    the shim bundled with this package is used, and compiled in place first if
    it has not been built yet and ``Settings.build_library`` allows it.
    """
    lib = _library_holder["lib"]
    if lib is None:
        from xapian_bridge.config import get_settings

        settings = get_settings()
        if settings.library_path is not None:
            lib = load_library(settings.library_path)
        else:
            try:
                lib = load_library(str(BUNDLED_LIBRARY))
            except LibraryLoadError:
                if not settings.build_library:
                    raise
                logger.info("Bundled shim not loadable; compiling it from %s", SHIM_SOURCE)
                lib = build_library(BUNDLED_LIBRARY)
        _library_holder["lib"] = lib
    return lib


def set_library(lib: Any) -> None:
    """Install ``lib`` as the process-wide native library."""
    _library_holder["lib"] = lib


def reset_library() -> None:
    """Forget the cached library; the next :func:`get_library` reloads it."""
    _library_holder["lib"] = None


def resolve(lib: Any | None) -> Any:
    """Return ``lib`` or the process-wide library when ``lib`` is None."""
    return get_library() if lib is None else lib


def new_error_slot() -> Any:
    """Allocate an out-parameter for native error messages."""
    return ctypes.pointer(c_char_p())


def read_error(slot: Any, default: str = "unknown native error") -> str:
    """Decode the message written into an error slot, if any."""
    message = slot.contents.value
    if not message:
        return default
    return message.decode("utf-8", errors="replace")


def to_bytes(value: str | bytes) -> bytes:
    """Normalize text input to bytes (UTF-8 for ``str``)."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"Expected str or bytes, got {type(value).__name__}")


def to_c_string(value: str | bytes, *, what: str = "string") -> bytes:
    """Return bytes suitable for a ``const char*`` argument.

    Raises ``ValueError`` when the payload contains a NUL byte, which a C string
    cannot carry.
    """
    data = to_bytes(value)
    if b"\x00" in data:
        raise ValueError(f"{what} contains a NUL byte and cannot cross the C string boundary: {data!r}")
    return data


def to_c_uint(value: int, *, what: str = "value") -> int:
    """Return ``value`` unchanged if it fits an ``unsigned`` native argument.

    ``ctypes`` silently wraps integers outside ``0..C_UINT_MAX``, so out of
    range input is rejected here instead.
    """
    if value < 0:
        raise ValueError(f"{what} must be non-negative, got {value}")
    if value > C_UINT_MAX:
        raise ValueError(f"{what} must not exceed {C_UINT_MAX}, got {value}")
    return value
