"""Shared test fixtures for the kaldi_codec test suite.

WHY: Most tests need small, exact Kaldi binary inputs. Writing the bytes
by hand in every test is noisy and error-prone; a single builder keeps
the byte layout in one place and the tests readable.

HOW: KaldiBytes appends tokens, width-prefixed scalars, int vectors and
tagged arrays in little-endian Kaldi layout. Fixtures expose the builder
class and a few pre-built model fragments (HMM and non-HMM topologies, a
transition model, a small nnet2 acoustic model).

RULES:
- Every builder method returns self so calls can be chained
- Float fixtures use values exactly representable in float32
"""

import io
import struct
from typing import Iterable

import numpy as np
import pytest


class KaldiBytes:
    """Chainable builder for Kaldi binary byte strings."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def raw(self, data: bytes) -> "KaldiBytes":
        self._buf += data
        return self

    def marker(self) -> "KaldiBytes":
        return self.raw(b"\0B")

    def token(self, text: str) -> "KaldiBytes":
        return self.raw(text.encode("ascii") + b" ")

    def int32(self, value: int) -> "KaldiBytes":
        return self.raw(struct.pack("<bi", 4, value))

    def int64(self, value: int) -> "KaldiBytes":
        return self.raw(struct.pack("<bq", 8, value))

    def float32(self, value: float) -> "KaldiBytes":
        return self.raw(struct.pack("<bf", 4, value))

    def float64(self, value: float) -> "KaldiBytes":
        return self.raw(struct.pack("<bd", 8, value))

    def int_vector(self, values: Iterable[int]) -> "KaldiBytes":
        """Integer vector as written by WriteIntegerVector (size byte, int32 length)."""
        array = np.asarray(list(values), dtype="<i4")
        return self.raw(struct.pack("<bi", 4, len(array)) + array.tobytes())

    def vector(self, values, dtype: str = "float32") -> "KaldiBytes":
        """Tagged FV/DV vector."""
        array = np.asarray(values, dtype=dtype)
        self.token("FV" if dtype == "float32" else "DV")
        self.int32(len(array))
        return self.raw(array.astype(array.dtype.newbyteorder("<")).tobytes())

    def matrix(self, values, dtype: str = "float32") -> "KaldiBytes":
        """Tagged FM/DM matrix, row-major."""
        array = np.asarray(values, dtype=dtype)
        self.token("FM" if dtype == "float32" else "DM")
        self.int32(array.shape[0])
        self.int32(array.shape[1])
        return self.raw(array.astype(array.dtype.newbyteorder("<")).tobytes())

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def stream(self) -> io.BytesIO:
        return io.BytesIO(self.getvalue())


# ---------------------------------------------------------------------------
# Model fragments
# ---------------------------------------------------------------------------


def write_hmm_topology(b: KaldiBytes) -> KaldiBytes:
    """Two phones sharing one 2-state left-to-right topology."""
    b.token("<Topology>")
    b.int_vector([1, 2])
    b.int_vector([-1, 0, 0])
    b.int32(1)  # one entry
    b.int32(2)  # two states
    # state 0: pdf-class 0, self-loop 0.75, forward 0.25
    b.int32(0).int32(2).int32(0).float32(0.75).int32(1).float32(0.25)
    # state 1: final, no pdf, no arcs
    b.int32(-1).int32(0)
    return b.token("</Topology>")


def write_non_hmm_topology(b: KaldiBytes) -> KaldiBytes:
    """One-phone topology using the -1 sentinel (self-loop pdf-classes present)."""
    b.token("<Topology>")
    b.int_vector([1])
    b.int_vector([-1, 0])
    b.int32(-1).int32(1)  # sentinel, then the real entry count
    b.int32(2)
    b.int32(0).int32(1).int32(1).int32(1).float32(1.0)
    b.int32(-1).int32(-1).int32(0)
    return b.token("</Topology>")


def write_transition_model(b: KaldiBytes, layout: str = "<Triples>") -> KaldiBytes:
    b.token("<TransitionModel>")
    write_hmm_topology(b)
    b.token(layout)
    b.int32(2)
    if layout == "<Triples>":
        b.int32(1).int32(0).int32(0)
        b.int32(2).int32(0).int32(0)
    else:
        b.int32(1).int32(0).int32(0).int32(1)
        b.int32(2).int32(0).int32(0).int32(1)
    b.token("</" + layout[1:])
    b.token("<LogProbs>").vector([0.0, -0.5, -1.5])
    b.token("</LogProbs>")
    return b.token("</TransitionModel>")


def write_splice(b: KaldiBytes) -> KaldiBytes:
    b.token("<SpliceComponent>")
    b.token("<InputDim>").int32(3)
    b.token("<LeftContext>").int32(1).token("<RightContext>").int32(1)
    b.token("<ConstComponentDim>").int32(0)
    return b.token("</SpliceComponent>")


def write_fixed_affine(b: KaldiBytes) -> KaldiBytes:
    b.token("<FixedAffineComponent>")
    b.token("<LinearParams>").matrix([[1.0, 0.0, 2.0], [0.5, -1.0, 0.25]])
    b.token("<BiasParams>").vector([0.5, -0.5])
    return b.token("</FixedAffineComponent>")


def write_softmax(b: KaldiBytes) -> KaldiBytes:
    b.token("<SoftmaxComponent>")
    b.token("<Dim>").int32(2)
    b.token("<ValueSum>").vector([1.0, 2.0], dtype="float64")
    b.token("<DerivSum>").vector([0.5, 0.25], dtype="float64")
    b.token("<Count>").float64(8.0)
    return b.token("</SoftmaxComponent>")


@pytest.fixture
def kaldi_bytes():
    """The KaldiBytes builder class; call it to start a new byte string."""
    return KaldiBytes


@pytest.fixture
def hmm_topology_bytes():
    return write_hmm_topology(KaldiBytes()).getvalue()


@pytest.fixture
def non_hmm_topology_bytes():
    return write_non_hmm_topology(KaldiBytes()).getvalue()


@pytest.fixture
def nnet_am_bytes():
    """A complete binary nnet2 model: splice → fixed affine → softmax."""
    b = KaldiBytes().marker()
    write_transition_model(b)
    b.token("<Nnet>")
    b.token("<NumComponents>").int32(3)
    b.token("<Components>")
    write_splice(b)
    write_fixed_affine(b)
    write_softmax(b)
    b.token("</Components>")
    b.token("</Nnet>")
    b.vector([0.25, 0.75])
    return b.getvalue()


@pytest.fixture
def sample_matrices():
    """Two small matrices, one float32 and one float64."""
    return {
        "utt1": np.arange(6, dtype=np.float32).reshape(2, 3) / 4,
        "utt2": np.array([[-1.5, 2.25], [3.0, 0.125], [1e-3, -7.0]], dtype=np.float64),
    }
