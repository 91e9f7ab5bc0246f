"""Tests for single-record matrix and vector codecs.

WHY: decode_matrix and encode_matrix are the public surface most callers
use. Dense records must round-trip bit-identically; compressed records
must reconstruct the documented column layout.

HOW: Compressed matrices are hand-assembled with header codes chosen so
that every 8-bit code decodes to its own value, which makes the expected
matrix readable in the test.
"""

import io
import struct

import numpy as np
import pytest

from kaldi_codec.core.primitives import read_token
from kaldi_codec.core.records import decode_matrix, decode_vector, encode_matrix
from kaldi_codec.core.quantization import dequantize16
from kaldi_codec.errors import FormatError, UnknownFormatError, UnsupportedFormatError


def _compressed(min_value, range_, headers, columns):
    """Assemble a CM payload: global header, per-column headers, column bytes."""
    nrow = len(columns[0])
    data = b"\0BCM " + struct.pack("<ffii", min_value, range_, nrow, len(columns))
    for header in headers:
        data += struct.pack("<4H", *header)
    for column in columns:
        data += bytes(column)
    return data


class TestDecodeDense:
    def test_float_matrix(self, kaldi_bytes):
        values = [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]
        stream = kaldi_bytes().marker().matrix(values).stream()
        matrix = decode_matrix(stream)
        assert matrix.dtype == np.float32
        assert matrix.shape == (2, 3)
        assert matrix.tolist() == values

    def test_double_matrix(self, kaldi_bytes):
        stream = kaldi_bytes().marker().matrix([[0.1, 0.2]], dtype="float64").stream()
        matrix = decode_matrix(stream)
        assert matrix.dtype == np.float64
        assert matrix[0, 0] == 0.1

    def test_result_is_writable(self, kaldi_bytes):
        matrix = decode_matrix(kaldi_bytes().marker().matrix([[1.0]]).stream())
        matrix[0, 0] = 2.0
        assert matrix[0, 0] == 2.0

    def test_empty_matrix(self, kaldi_bytes):
        stream = kaldi_bytes().marker().token("FM").int32(0).int32(0).stream()
        assert decode_matrix(stream).shape == (0, 0)

    def test_unknown_token(self, kaldi_bytes):
        stream = kaldi_bytes().marker().token("XM").int32(1).int32(1).stream()
        with pytest.raises(UnknownFormatError) as excinfo:
            decode_matrix(stream)
        assert excinfo.value.token == "XM"

    def test_text_mode_rejected(self):
        with pytest.raises(UnsupportedFormatError):
            decode_matrix(io.BytesIO(b" [\n 1 2 ]\n"))

    def test_truncated_payload(self, kaldi_bytes):
        stream = kaldi_bytes().marker().token("FM").int32(2).int32(2).raw(b"\0" * 8).stream()
        with pytest.raises(FormatError):
            decode_matrix(stream)


class TestDecodeCompressed:
    def test_column_major_layout(self):
        identity = (0, 64, 192, 255)
        data = _compressed(0.0, 65535.0, [identity, identity], [[0, 100, 255], [10, 64, 200]])
        matrix = decode_matrix(io.BytesIO(data))
        assert matrix.dtype == np.float32
        assert matrix.shape == (3, 2)
        assert matrix.tolist() == [[0.0, 10.0], [100.0, 64.0], [255.0, 200.0]]
        assert matrix.flags["C_CONTIGUOUS"]

    def test_values_within_column_range(self):
        header = (1000, 2000, 3000, 4000)
        data = _compressed(-1.0, 2.0, [header], [list(range(256))])
        matrix = decode_matrix(io.BytesIO(data))
        low = dequantize16(1000, -1.0, 2.0)
        high = dequantize16(4000, -1.0, 2.0)
        assert matrix.shape == (256, 1)
        assert matrix.min() >= low
        assert matrix.max() <= high
        assert matrix[64, 0] == dequantize16(2000, -1.0, 2.0)
        assert matrix[192, 0] == dequantize16(3000, -1.0, 2.0)

    def test_zero_rows(self):
        data = _compressed(0.0, 1.0, [(0, 0, 0, 0)], [[]])
        assert decode_matrix(io.BytesIO(data)).shape == (0, 1)

    def test_stops_at_record_end(self):
        identity = (0, 64, 192, 255)
        data = _compressed(0.0, 65535.0, [identity], [[1, 2]]) + b"next "
        stream = io.BytesIO(data)
        decode_matrix(stream)
        assert read_token(stream) == "next"


class TestDecodeVector:
    def test_alignment(self, kaldi_bytes):
        stream = kaldi_bytes().marker().int32(3).int32(5).int32(5).int32(9).stream()
        values = decode_vector(stream)
        assert values.dtype == np.int64
        assert values.tolist() == [5, 5, 9]

    def test_mixed_widths(self, kaldi_bytes):
        stream = kaldi_bytes().marker().int32(2).int64(2 ** 35).int32(-1).stream()
        assert decode_vector(stream).tolist() == [2 ** 35, -1]

    def test_empty(self, kaldi_bytes):
        assert decode_vector(kaldi_bytes().marker().int32(0).stream()).size == 0


class TestEncodeMatrix:
    @pytest.mark.parametrize("dtype, token", [(np.float32, b"FM "), (np.float64, b"DM ")])
    def test_layout(self, dtype, token):
        matrix = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]], dtype=dtype)
        out = io.BytesIO()
        encode_matrix(out, "utt1", matrix)
        expected = (
            b"utt1 \0B" + token
            + struct.pack("<bi", 4, 3) + struct.pack("<bi", 4, 2)
            + matrix.astype(np.dtype(dtype).newbyteorder("<")).tobytes()
        )
        assert out.getvalue() == expected

    def test_round_trip_is_bit_identical(self, sample_matrices):
        for key, matrix in sample_matrices.items():
            out = io.BytesIO()
            encode_matrix(out, key, matrix)
            out.seek(0)
            assert read_token(out) == key
            decoded = decode_matrix(out)
            assert decoded.dtype == matrix.dtype
            assert decoded.tobytes() == matrix.tobytes()

    def test_fortran_order_written_row_major(self):
        matrix = np.asfortranarray(np.arange(6, dtype=np.float32).reshape(2, 3))
        out = io.BytesIO()
        encode_matrix(out, "k", matrix)
        out.seek(0)
        read_token(out)
        assert decode_matrix(out).tolist() == matrix.tolist()

    @pytest.mark.parametrize(
        "dtype",
        [
            np.float16,
            pytest.param(
                np.longdouble,
                marks=pytest.mark.skipif(
                    np.dtype(np.longdouble).itemsize == 8, reason="longdouble is float64 here"
                ),
            ),
        ],
    )
    def test_other_float_widths_rejected(self, dtype):
        out = io.BytesIO()
        with pytest.raises(UnsupportedFormatError, match="float32 or float64"):
            encode_matrix(out, "k", np.ones((2, 2), dtype=dtype))
        assert out.getvalue() == b""

    def test_integer_matrix_rejected(self):
        with pytest.raises(UnsupportedFormatError, match="float32 or float64"):
            encode_matrix(io.BytesIO(), "k", np.zeros((2, 2), dtype=np.int32))

    def test_vector_rejected(self):
        with pytest.raises(UnsupportedFormatError, match="2-D"):
            encode_matrix(io.BytesIO(), "k", np.zeros(3, dtype=np.float32))
