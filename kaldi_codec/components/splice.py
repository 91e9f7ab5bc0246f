"""Frame-splicing component.

WHY: nnet2 input layers splice neighbouring frames together; the splice
offsets decide how much left/right acoustic context the network sees.

HOW: After <InputDim>, the context is written either as a left/right
pair (contiguous range) or as an explicit int32 offset list, followed
by <ConstComponentDim>.

RULES:
- <LeftContext> L <RightContext> R → context = -L..R inclusive
- <Context> → explicit offsets, kept in file order
- Any other token at that position is a FormatError
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, ClassVar

from kaldi_codec.components.base import NnetComponent
from kaldi_codec.core.primitives import read_int, read_token, read_typed_vector
from kaldi_codec.errors import FormatError


@dataclass(frozen=True)
class SpliceComponent(NnetComponent):
    """Splices input frames at the given relative offsets."""

    kind: ClassVar[str] = "SpliceComponent"

    input_dim: int
    context: tuple[int, ...]
    const_component_dim: int

    @classmethod
    def read(cls, stream: BinaryIO) -> SpliceComponent:
        input_dim = read_int(stream, "<InputDim>")
        token = read_token(stream)
        if token == "<LeftContext>":
            left_context = read_int(stream)
            right_context = read_int(stream, "<RightContext>")
            context = tuple(range(-left_context, right_context + 1))
        elif token == "<Context>":
            context = tuple(int(c) for c in read_typed_vector(stream, "int32"))
        else:
            raise FormatError(
                "Expected <LeftContext> or <Context>, saw {}".format(token),
                expected="<LeftContext>",
                actual=token,
            )
        const_component_dim = read_int(stream, "<ConstComponentDim>")
        return cls(
            input_dim=input_dim,
            context=context,
            const_component_dim=const_component_dim,
        )
