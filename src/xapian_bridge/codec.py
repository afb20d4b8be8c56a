"""NUL-free escaping for payloads that travel as C strings.

Values and document data are handed to the native layer as ``const char*``,
which ends at the first NUL byte. Payloads are therefore escaped with the
sentinel byte ``z``:

* ``0x00`` is written as ``z0``
* ``z`` is written as ``zz``
* every other byte is copied verbatim

Decoding reverses the mapping and rejects any other byte after a sentinel, a
sentinel at the very end of the input, and raw NUL bytes (which the encoder
never emits). The sentinel is an ordinary
letter, so encoded payloads are not self-describing: only bytes that were
produced by :func:`encode` may be passed to :func:`decode`.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from xapian_bridge.errors import DecodeError
from xapian_bridge.observability.metrics import DECODE_FAILURES


logger = logging.getLogger(__name__)

SENTINEL = 0x7A  # b"z"
ZERO_FOLLOWER = 0x30  # b"0"

_SENTINEL_BYTE = bytes([SENTINEL])
_ESCAPED_NUL = bytes([SENTINEL, ZERO_FOLLOWER])
_ESCAPED_SENTINEL = bytes([SENTINEL, SENTINEL])


def encode(data: bytes) -> bytes:
    """Escape ``data`` so that it contains no NUL byte. Never fails."""
    if b"\x00" not in data and _SENTINEL_BYTE not in data:
        return bytes(data)
    out = bytearray()
    start = 0
    for index, byte in enumerate(data):
        if byte == 0:
            replacement = _ESCAPED_NUL
        elif byte == SENTINEL:
            replacement = _ESCAPED_SENTINEL
        else:
            continue
        out += data[start:index]
        out += replacement
        start = index + 1
    out += data[start:]
    return bytes(out)


def decode(data: bytes) -> bytes:
    """Reverse :func:`encode`.

    Raises:
        DecodeError: when a sentinel is followed by anything other than ``0``
            or another sentinel, when the input ends with a lone sentinel, or
            when it contains an unescaped NUL byte.
    """
    out = bytearray()
    start = 0
    length = len(data)
    index = data.find(_SENTINEL_BYTE)
    while index != -1:
        out += data[start:index]
        if index + 1 >= length:
            _fail(f"truncated escape sequence at offset {index}", index)
        follower = data[index + 1]
        if follower == ZERO_FOLLOWER:
            out.append(0)
        elif follower == SENTINEL:
            out.append(SENTINEL)
        else:
            _fail(f"invalid escape sequence {bytes(data[index : index + 2])!r} at offset {index}", index)
        start = index + 2
        index = data.find(_SENTINEL_BYTE, start)
    out += data[start:]
    nul = data.find(b"\x00")
    if nul != -1:
        _fail(f"unescaped NUL byte at offset {nul}", nul)
    return bytes(out)


def _fail(message: str, offset: int) -> NoReturn:
    DECODE_FAILURES.inc()
    logger.warning("Failed to decode escaped payload: %s", message)
    raise DecodeError(f"failed to decode escaped payload: {message}", offset=offset)
