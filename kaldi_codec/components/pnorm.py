"""P-norm pooling component."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, ClassVar

from kaldi_codec.components.base import NnetComponent
from kaldi_codec.core.primitives import read_float, read_int


@dataclass(frozen=True)
class PnormComponent(NnetComponent):
    """Pools groups of input_dim / output_dim inputs with the p-norm."""

    kind: ClassVar[str] = "PnormComponent"

    input_dim: int
    output_dim: int
    p: float

    @classmethod
    def read(cls, stream: BinaryIO) -> PnormComponent:
        input_dim = read_int(stream, "<InputDim>")
        output_dim = read_int(stream, "<OutputDim>")
        p = read_float(stream, "<P>")
        return cls(input_dim=input_dim, output_dim=output_dim, p=p)
