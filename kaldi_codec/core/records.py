"""Single-record codecs for Kaldi archive values.

WHY: An archive record is ``<key> <value>`` where the value is a binary
matrix (dense float, dense double or compressed) or an integer vector.
Stream iteration, script-file resolution and the CLI all need to decode
or encode exactly one value at the current stream position.

HOW: decode_matrix dispatches on the type token after the binary marker:
"CM" runs the column-quantile reconstruction, "FM"/"DM" read a dense
row-major payload. decode_vector reads width-prefixed ints. encode_matrix
writes the FM/DM layout that decode_matrix reads back bit-identically.

RULES:
- Archive layout: <key> ' ' \\0B <type-token> ' ' <payload>
- Compressed payload is column-major on disk; the result is row-major
- Only float32 (FM) and float64 (DM) matrices can be written
- Integer vectors come back as int64 regardless of stored width
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO

import numpy as np

from kaldi_codec.core.primitives import (
    BINARY_MARKER,
    check_binary_marker,
    read_exact,
    read_int,
    read_token,
)
from kaldi_codec.core.quantization import dequantize8, dequantize16
from kaldi_codec.errors import FormatError, UnknownFormatError, UnsupportedFormatError

logger = logging.getLogger(__name__)

COMPRESSED_TOKEN = "CM"

# Dense matrix type token → little-endian element dtype
DENSE_MATRIX_TYPES = {
    "FM": np.dtype("<f4"),
    "DM": np.dtype("<f8"),
}

# Element dtype name → type token written before the payload
_WRITE_TOKENS = {
    "float32": "FM",
    "float64": "DM",
}


def _decode_compressed(stream: BinaryIO) -> np.ndarray:
    min_value, range_ = struct.unpack("<ff", read_exact(stream, 8))
    nrow, ncol = struct.unpack("<ii", read_exact(stream, 8))
    if nrow < 0 or ncol < 0:
        raise FormatError("Negative compressed matrix size {}x{}".format(nrow, ncol))

    # One (p0, p25, p75, p100) header per column, all columns first
    codes = np.frombuffer(read_exact(stream, 8 * ncol), dtype="<u2").reshape(ncol, 4)
    quantiles = dequantize16(codes, min_value, range_).reshape(ncol, 4)

    # Then nrow bytes per column
    data = np.frombuffer(read_exact(stream, nrow * ncol), dtype=np.uint8).reshape(ncol, nrow)
    columns = dequantize8(
        data,
        (quantiles[:, 0:1], quantiles[:, 1:2], quantiles[:, 2:3], quantiles[:, 3:4]),
    )
    return np.ascontiguousarray(np.asarray(columns, dtype=np.float32).reshape(ncol, nrow).T)


def decode_matrix(stream: BinaryIO) -> np.ndarray:
    """Decode one binary matrix at the current stream position.

    WHY: Features, transforms and statistics in Kaldi archives are all
    matrices, stored dense (FM/DM) or lossily compressed (CM).

    HOW: Checks the binary marker, reads the type token, then:
      CM     → global min/range, per-column quantiles, column-major bytes
      FM/DM  → width-prefixed rows/cols, then rows*cols raw values

    RULES:
    - Unknown type token raises UnknownFormatError
    - CM yields float32; FM yields float32; DM yields float64
    - The result is a fresh, writable (rows, cols) array

    Args:
        stream: Binary stream positioned at the ``\\0B`` marker.

    Returns:
        2-D numpy array of shape (rows, cols).
    """
    check_binary_marker(stream)
    token = read_token(stream)
    logger.debug("Matrix type token %s", token)
    if token == COMPRESSED_TOKEN:
        return _decode_compressed(stream)

    dtype = DENSE_MATRIX_TYPES.get(token)
    if dtype is None:
        raise UnknownFormatError(token)
    nrow = read_int(stream)
    ncol = read_int(stream)
    if nrow < 0 or ncol < 0:
        raise FormatError("Negative matrix size {}x{}".format(nrow, ncol))
    payload = read_exact(stream, nrow * ncol * dtype.itemsize)
    matrix = np.frombuffer(payload, dtype=dtype).reshape(nrow, ncol)
    return matrix.astype(dtype.newbyteorder("="))


def decode_vector(stream: BinaryIO) -> np.ndarray:
    """Decode one binary integer vector (alignments, phone sequences).

    HOW: After the binary marker comes a width-prefixed length, then
    that many width-prefixed integers. The result is sized up front.
    """
    check_binary_marker(stream)
    length = read_int(stream)
    if length < 0:
        raise FormatError("Negative vector length {}".format(length))
    values = np.empty(length, dtype=np.int64)
    for i in range(length):
        values[i] = read_int(stream)
    return values


def encode_matrix(stream: BinaryIO, key: str, matrix: np.ndarray) -> None:
    """Write one keyed matrix record in Kaldi binary archive layout.

    WHY: Python pipelines produce features that Kaldi tools must read
    back; FM/DM is the lossless layout every Kaldi reader accepts.

    HOW: Writes ``key``, a space, the ``\\0B`` marker, ``FM `` or ``DM ``,
    then rows and cols as width byte 4 + int32, then the values in
    row-major order, little-endian.

    RULES:
    - Only 2-D float32 / float64 arrays; anything else is unsupported
    - decode_matrix reads the record back bit-identically

    Args:
        stream: Binary stream opened for writing.
        key: Record key (must not contain spaces).
        matrix: 2-D numpy array of float32 or float64.
    """
    array = np.asarray(matrix)
    token = _WRITE_TOKENS.get(array.dtype.name)
    if token is None:
        raise UnsupportedFormatError(
            "Unknown floating point type {}; use float32 or float64".format(array.dtype)
        )
    if array.ndim != 2:
        raise UnsupportedFormatError(
            "Only 2-D matrices can be written, got shape {}".format(array.shape)
        )
    nrow, ncol = array.shape
    stream.write(key.encode("ascii") + b" " + BINARY_MARKER)
    stream.write(token.encode("ascii") + b" ")
    stream.write(struct.pack("<bi", 4, nrow))
    stream.write(struct.pack("<bi", 4, ncol))
    stream.write(np.ascontiguousarray(array, dtype=DENSE_MATRIX_TYPES[token]).tobytes())
    logger.debug("Wrote %s %s %dx%d", key, token, nrow, ncol)
