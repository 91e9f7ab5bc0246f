"""Core binary codecs: primitives, quantization, records, arrays and streams.

WHY: Everything that touches raw Kaldi bytes lives here so the format
rules (token delimiters, width bytes, marker checks, payload order) are
defined once and shared by archives, script files and model files.

HOW: primitives.py reads tokens and scalars, quantization.py rebuilds
compressed values, records.py and arrays.py decode whole values, and
stream.py turns archives and script files into generators.
commands.py runs script-file commands.

RULES:
- No module here knows about HMMs or neural networks
- Every reader takes an open binary stream and advances it forward only
"""

from kaldi_codec.core.arrays import decode_tagged_array
from kaldi_codec.core.primitives import (
    check_binary_marker,
    expect_token,
    read_float,
    read_int,
    read_token,
    read_typed_vector,
)
from kaldi_codec.core.quantization import dequantize8, dequantize16
from kaldi_codec.core.records import decode_matrix, decode_vector, encode_matrix
from kaldi_codec.core.stream import (
    iterate_archive,
    iterate_script,
    load_ark_matrices,
    load_ark_vectors,
    load_scp_matrices,
    save_ark_matrices,
)

__all__ = [
    "check_binary_marker",
    "decode_matrix",
    "decode_tagged_array",
    "decode_vector",
    "dequantize8",
    "dequantize16",
    "encode_matrix",
    "expect_token",
    "iterate_archive",
    "iterate_script",
    "load_ark_matrices",
    "load_ark_vectors",
    "load_scp_matrices",
    "read_float",
    "read_int",
    "read_token",
    "read_typed_vector",
    "save_ark_matrices",
]
