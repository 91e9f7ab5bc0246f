"""Elementwise nonlinearity components and their activation statistics.

WHY: Every nnet2 nonlinearity (sigmoid, tanh, ReLU, softmax, the
normalize layer...) stores the same fields: its dimension plus the
running sums of values and derivatives seen during training, and the
number of frames those sums cover.

HOW: NonlinearComponent implements the shared read; each concrete kind
only sets its tag name.

RULES:
- Field order: <Dim> int, <ValueSum> array, <DerivSum> array, <Count> float
- value_sum / deriv_sum keep the element width they were written with
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

import numpy as np

from kaldi_codec.components.base import NnetComponent
from kaldi_codec.core.arrays import decode_tagged_array
from kaldi_codec.core.primitives import read_float, read_int


@dataclass(frozen=True, eq=False)
class NonlinearComponent(NnetComponent):
    """Shared layout of all nnet2 nonlinearities."""

    dim: int
    value_sum: np.ndarray
    deriv_sum: np.ndarray
    count: float

    @classmethod
    def read(cls, stream: BinaryIO) -> NonlinearComponent:
        dim = read_int(stream, "<Dim>")
        value_sum = decode_tagged_array(stream, "<ValueSum>")
        deriv_sum = decode_tagged_array(stream, "<DerivSum>")
        count = read_float(stream, "<Count>")
        return cls(dim=dim, value_sum=value_sum, deriv_sum=deriv_sum, count=count)


class SigmoidComponent(NonlinearComponent):
    kind = "SigmoidComponent"


class TanhComponent(NonlinearComponent):
    kind = "TanhComponent"


class RectifiedLinearComponent(NonlinearComponent):
    kind = "RectifiedLinearComponent"


class SoftHingeComponent(NonlinearComponent):
    kind = "SoftHingeComponent"


class SoftmaxComponent(NonlinearComponent):
    kind = "SoftmaxComponent"


class LogSoftmaxComponent(NonlinearComponent):
    kind = "LogSoftmaxComponent"


class NormalizeComponent(NonlinearComponent):
    """Scales each frame to unit root-mean-square."""

    kind = "NormalizeComponent"
