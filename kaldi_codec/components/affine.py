"""Affine (linear + bias) components.

WHY: Affine layers carry almost all of an nnet2 model's parameters.
Two variants appear in trained models: the fixed affine transform used
for LDA-like input projections, and the trainable affine layer with
online natural-gradient preconditioning.

HOW: Both read <LinearParams> as a tagged matrix and <BiasParams> as a
tagged vector. The preconditioned variant adds its learning rate before
the parameters and the preconditioner settings after them.

RULES:
- <Rank> sets rank_in and rank_out together; <RankIn>/<RankOut> set them apart
- <UpdatePeriod> is optional and defaults to 1
- <NumSamplesHistory>, <Alpha>, <MaxChangePerSample> are floats
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, ClassVar

import numpy as np

from kaldi_codec.components.base import NnetComponent
from kaldi_codec.core.arrays import decode_tagged_array
from kaldi_codec.core.primitives import expect_token, read_float, read_int, read_token
from kaldi_codec.errors import FormatError

DEFAULT_UPDATE_PERIOD = 1


@dataclass(frozen=True, eq=False)
class FixedAffineComponent(NnetComponent):
    """Affine transform that is not updated during training."""

    kind: ClassVar[str] = "FixedAffineComponent"

    linear_params: np.ndarray
    bias_params: np.ndarray

    @classmethod
    def read(cls, stream: BinaryIO) -> FixedAffineComponent:
        linear_params = decode_tagged_array(stream, "<LinearParams>")
        bias_params = decode_tagged_array(stream, "<BiasParams>")
        return cls(linear_params=linear_params, bias_params=bias_params)


@dataclass(frozen=True, eq=False)
class AffineComponentPreconditionedOnline(NnetComponent):
    """Trainable affine layer with online preconditioning settings.

    RULES:
    - rank_in / rank_out: preconditioner ranks for input / output side
    - update_period: how often (in minibatches) the preconditioner updates
    """

    kind: ClassVar[str] = "AffineComponentPreconditionedOnline"

    learning_rate: float
    linear_params: np.ndarray
    bias_params: np.ndarray
    rank_in: int
    rank_out: int
    update_period: int
    num_samples_history: float
    alpha: float
    max_change_per_sample: float

    @classmethod
    def read(cls, stream: BinaryIO) -> AffineComponentPreconditionedOnline:
        learning_rate = read_float(stream, "<LearningRate>")
        linear_params = decode_tagged_array(stream, "<LinearParams>")
        bias_params = decode_tagged_array(stream, "<BiasParams>")

        token = read_token(stream)
        if token == "<Rank>":
            rank_in = rank_out = read_int(stream)
        elif token == "<RankIn>":
            rank_in = read_int(stream)
            rank_out = read_int(stream, "<RankOut>")
        else:
            raise FormatError(
                "Expected <Rank> or <RankIn>, saw {}".format(token),
                expected="<Rank>",
                actual=token,
            )

        token = read_token(stream)
        if token == "<UpdatePeriod>":
            update_period = read_int(stream)
            expect_token(stream, "<NumSamplesHistory>")
        elif token == "<NumSamplesHistory>":
            update_period = DEFAULT_UPDATE_PERIOD
        else:
            raise FormatError(
                "Expected <UpdatePeriod> or <NumSamplesHistory>, saw {}".format(token),
                expected="<NumSamplesHistory>",
                actual=token,
            )
        num_samples_history = read_float(stream)
        alpha = read_float(stream, "<Alpha>")
        max_change_per_sample = read_float(stream, "<MaxChangePerSample>")

        return cls(
            learning_rate=learning_rate,
            linear_params=linear_params,
            bias_params=bias_params,
            rank_in=rank_in,
            rank_out=rank_out,
            update_period=update_period,
            num_samples_history=num_samples_history,
            alpha=alpha,
            max_change_per_sample=max_change_per_sample,
        )
