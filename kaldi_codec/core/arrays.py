"""Tagged vector/matrix decoding used inside Kaldi model files.

WHY: Model parameters (weights, biases, log-probs, priors, statistics)
are written by Kaldi's Vector/Matrix Write as a two-letter type token
followed by the dimensions and the raw elements. Unlike archive records
they carry no binary marker of their own.

HOW: The first letter of the token picks the element width (F = float32,
D = float64), the second the shape (V = vector, M = matrix).

RULES:
- Token must be exactly two characters
- F/D and V/M are the only accepted letters; others are unsupported
- Matrices are row-major (rows, cols)
"""

from __future__ import annotations

from typing import BinaryIO, Optional

import numpy as np

from kaldi_codec.core.primitives import expect_token, read_exact, read_int, read_token
from kaldi_codec.errors import FormatError, UnsupportedFormatError

ELEMENT_TYPES = {
    "F": np.dtype("<f4"),
    "D": np.dtype("<f8"),
}


def _read_elements(stream: BinaryIO, dtype: np.dtype, count: int) -> np.ndarray:
    if count < 0:
        raise FormatError("Negative array size {}".format(count))
    payload = read_exact(stream, count * dtype.itemsize)
    return np.frombuffer(payload, dtype=dtype).astype(dtype.newbyteorder("="))


def decode_tagged_array(stream: BinaryIO, tag: Optional[str] = None) -> np.ndarray:
    """Decode a Kaldi FV/DV/FM/DM tagged array.

    Args:
        stream: Binary stream positioned at the type token (or at ``tag``).
        tag: Optional field tag (e.g. ``"<BiasParams>"``) expected first.

    Returns:
        1-D array for vectors, 2-D (rows, cols) array for matrices.
    """
    if tag is not None:
        expect_token(stream, tag)
    token = read_token(stream)
    if len(token) != 2:
        raise UnsupportedFormatError("Unexpected array token {!r}".format(token))

    dtype = ELEMENT_TYPES.get(token[0])
    if dtype is None:
        raise UnsupportedFormatError("Unknown element type {!r}".format(token[0]))

    if token[1] == "V":
        length = read_int(stream)
        return _read_elements(stream, dtype, length)
    if token[1] == "M":
        nrow = read_int(stream)
        ncol = read_int(stream)
        if nrow < 0 or ncol < 0:
            raise FormatError("Negative matrix size {}x{}".format(nrow, ncol))
        return _read_elements(stream, dtype, nrow * ncol).reshape(nrow, ncol)
    raise UnsupportedFormatError("Unknown array type {!r}".format(token[1]))
