"""Primitive readers for the Kaldi binary encoding.

WHY: Every Kaldi binary object is built from the same few primitives:
space-terminated tokens, the ``\\0B`` binary marker, integers and floats
prefixed by a one-byte width, and length-prefixed typed vectors. All
higher-level decoders share these readers so format rules live in one
place.

HOW: Each reader pulls exactly the bytes it needs from a binary stream
with ``stream.read(n)``. Scalars are unpacked with struct (little-endian),
vectors with numpy.frombuffer. A short read raises FormatError.

RULES:
- Tokens are ASCII and terminated by a single space byte (consumed)
- The binary marker is exactly b"\\0B"; anything else is text mode
- Width bytes must be 4 or 8; any other value is unsupported
- All multi-byte values are little-endian
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Optional

import numpy as np

from kaldi_codec.errors import FormatError, UnsupportedFormatError

BINARY_MARKER = b"\0B"
TOKEN_DELIMITER = b" "

_INT_FORMATS = {4: "<i", 8: "<q"}
_FLOAT_FORMATS = {4: "<f", 8: "<d"}


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise FormatError on a short read."""
    data = stream.read(size)
    if data is None or len(data) != size:
        got = 0 if not data else len(data)
        raise FormatError(
            "Unexpected end of stream: wanted {} bytes, got {}".format(size, got)
        )
    return data


def at_end(stream: BinaryIO) -> bool:
    """Return True when no byte is left in the stream, without consuming one.

    WHY: Archive iteration stops at end-of-stream, but the next key must
    not be half-read to find that out.

    HOW: Buffered readers expose ``peek``; other seekable streams are
    probed with read(1) followed by a seek back.

    RULES:
    - Never consumes a byte
    - Non-seekable streams without ``peek`` are not supported
    """
    peek = getattr(stream, "peek", None)
    if peek is not None:
        return len(peek(1)) == 0
    position = stream.tell()
    probe = stream.read(1)
    stream.seek(position)
    return not probe


def read_token(stream: BinaryIO) -> str:
    """Read one space-terminated ASCII token.

    WHY: Kaldi writes structural tags (``<Nnet>``), type codes (``FM``)
    and archive keys as bare words followed by one space.

    HOW: Reads byte by byte until the space delimiter, which is consumed
    and not returned.

    RULES:
    - Raises FormatError if the stream ends before the delimiter
    - Raises FormatError on a non-ASCII byte

    Args:
        stream: Binary stream positioned at the first byte of the token.

    Returns:
        The token text without the trailing space.
    """
    chars = bytearray()
    while True:
        byte = stream.read(1)
        if not byte:
            raise FormatError(
                "Unexpected end of stream while reading token {!r}".format(chars.decode("latin-1"))
            )
        if byte == TOKEN_DELIMITER:
            break
        chars += byte
    try:
        return chars.decode("ascii")
    except UnicodeDecodeError as exc:
        raise FormatError("Non-ASCII byte in token {!r}".format(bytes(chars))) from exc


def expect_token(stream: BinaryIO, expected: str) -> None:
    """Read a token and fail unless it equals ``expected``."""
    actual = read_token(stream)
    if actual != expected:
        raise FormatError(
            "Expected {}, saw {}".format(expected, actual),
            expected=expected,
            actual=actual,
        )


def check_binary_marker(stream: BinaryIO) -> None:
    """Consume the two-byte ``\\0B`` marker that opens every binary object.

    RULES:
    - Anything other than b"\\0B" means text mode, which is unsupported
    """
    marker = read_exact(stream, 2)
    if marker != BINARY_MARKER:
        raise UnsupportedFormatError(
            "Only binary format is supported (expected \\0B marker, saw {!r})".format(marker)
        )


def _read_sized(stream: BinaryIO, formats: dict, what: str):
    size = read_exact(stream, 1)[0]
    fmt = formats.get(size)
    if fmt is None:
        raise UnsupportedFormatError("Unknown {} size {}".format(what, size))
    return struct.unpack(fmt, read_exact(stream, size))[0]


def read_int(stream: BinaryIO, tag: Optional[str] = None) -> int:
    """Read a width-prefixed little-endian signed integer.

    WHY: Kaldi's WriteBasicType stores the byte width (4 or 8) before
    every scalar so readers can accept both int32 and int64.

    RULES:
    - When ``tag`` is given, that token is expected first
    - Width byte must be 4 or 8, else UnsupportedFormatError
    """
    if tag is not None:
        expect_token(stream, tag)
    return _read_sized(stream, _INT_FORMATS, "int")


def read_float(stream: BinaryIO, tag: Optional[str] = None) -> float:
    """Read a width-prefixed IEEE float32/float64, optionally after ``tag``."""
    if tag is not None:
        expect_token(stream, tag)
    return _read_sized(stream, _FLOAT_FORMATS, "float")


def read_typed_vector(stream: BinaryIO, dtype="int32") -> np.ndarray:
    """Read a length-prefixed vector of fixed-size elements.

    WHY: Integer vectors in model files (phone lists, splice contexts)
    are written as one element-size byte, an int32 length, then the raw
    elements.

    HOW: Verifies the size byte against ``dtype``'s item size, reads the
    int32 length and decodes the payload with numpy.

    RULES:
    - Size byte must equal the element size, else UnsupportedFormatError
    - A negative length is a FormatError

    Args:
        stream: Binary stream positioned at the size byte.
        dtype: numpy dtype of one element (little-endian is assumed).

    Returns:
        A 1-D numpy array of ``dtype``.
    """
    element = np.dtype(dtype).newbyteorder("<")
    size = read_exact(stream, 1)[0]
    if size != element.itemsize:
        raise UnsupportedFormatError(
            "Type size check failed: stream has {}, expected {}".format(size, element.itemsize)
        )
    length = struct.unpack("<i", read_exact(stream, 4))[0]
    if length < 0:
        raise FormatError("Negative vector length {}".format(length))
    payload = read_exact(stream, length * element.itemsize)
    return np.frombuffer(payload, dtype=element).astype(element.newbyteorder("="))
