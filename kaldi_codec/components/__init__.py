"""Nnet component registry: the closed set of decodable component kinds.

WHY: The model loader reads a component's opening tag (e.g.
``<SpliceComponent>``) and must find the matching decoder. A single
explicit table keeps the supported set closed and auditable: a kind is
decodable if and only if it is listed here.

HOW: COMPONENTS maps the tag name without angle brackets to the
component *class*. The loader calls ``COMPONENTS[kind].read(stream)``.

RULES:
- Keys equal each class's ``kind`` attribute
- Values are NnetComponent subclasses (not instances)
- A tag missing from this table is an UnknownComponentError
"""

from __future__ import annotations

from kaldi_codec.components.affine import AffineComponentPreconditionedOnline, FixedAffineComponent
from kaldi_codec.components.base import NnetComponent
from kaldi_codec.components.nonlinear import (
    LogSoftmaxComponent,
    NonlinearComponent,
    NormalizeComponent,
    RectifiedLinearComponent,
    SigmoidComponent,
    SoftHingeComponent,
    SoftmaxComponent,
    TanhComponent,
)
from kaldi_codec.components.placeholder import (
    AdditiveNoiseComponent,
    AffineComponent,
    AffineComponentPreconditioned,
    BlockAffineComponent,
    DctComponent,
    DropoutComponent,
    MaxoutComponent,
    PermuteComponent,
    PlaceholderComponent,
    PowerComponent,
    ScaleComponent,
    SpliceMaxComponent,
    SumGroupComponent,
)
from kaldi_codec.components.pnorm import PnormComponent
from kaldi_codec.components.scale import FixedScaleComponent
from kaldi_codec.components.splice import SpliceComponent

COMPONENTS: dict[str, type[NnetComponent]] = {
    "SpliceComponent": SpliceComponent,
    "FixedAffineComponent": FixedAffineComponent,
    "AffineComponentPreconditionedOnline": AffineComponentPreconditionedOnline,
    "PnormComponent": PnormComponent,
    "NormalizeComponent": NormalizeComponent,
    "FixedScaleComponent": FixedScaleComponent,
    "SoftmaxComponent": SoftmaxComponent,
    "SigmoidComponent": SigmoidComponent,
    "TanhComponent": TanhComponent,
    "RectifiedLinearComponent": RectifiedLinearComponent,
    "SoftHingeComponent": SoftHingeComponent,
    "LogSoftmaxComponent": LogSoftmaxComponent,
    # Recognised but not decoded; one token is consumed
    "AffineComponent": AffineComponent,
    "AffineComponentPreconditioned": AffineComponentPreconditioned,
    "BlockAffineComponent": BlockAffineComponent,
    "PermuteComponent": PermuteComponent,
    "DctComponent": DctComponent,
    "SumGroupComponent": SumGroupComponent,
    "DropoutComponent": DropoutComponent,
    "MaxoutComponent": MaxoutComponent,
    "PowerComponent": PowerComponent,
    "ScaleComponent": ScaleComponent,
    "AdditiveNoiseComponent": AdditiveNoiseComponent,
    "SpliceMaxComponent": SpliceMaxComponent,
}

__all__ = [
    "COMPONENTS",
    "AffineComponentPreconditionedOnline",
    "FixedAffineComponent",
    "FixedScaleComponent",
    "NnetComponent",
    "NonlinearComponent",
    "NormalizeComponent",
    "PlaceholderComponent",
    "PnormComponent",
    "SoftmaxComponent",
    "SpliceComponent",
]
