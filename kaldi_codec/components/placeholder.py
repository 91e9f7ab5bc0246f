"""Known nnet2 component kinds whose fields are not decoded yet.

WHY: These kinds are legitimate nnet2 components, so meeting one is not
the same as meeting garbage. Until their field layouts are implemented
they are recognised by name and stepped over with a single token read.

HOW: PlaceholderComponent.read consumes exactly one token and keeps it;
each subclass below only names the kind it stands in for. The loader
then expects the closing tag as usual, so a component with more fields
than one token still fails there with a FormatError.

RULES:
- Reading a placeholder logs a warning naming the kind
- The consumed token is kept in ``token`` for inspection
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO

from kaldi_codec.components.base import NnetComponent
from kaldi_codec.core.primitives import read_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceholderComponent(NnetComponent):
    """A recognised component kind whose fields were skipped."""

    token: str

    @classmethod
    def read(cls, stream: BinaryIO) -> PlaceholderComponent:
        logger.warning("Component %s is not decoded; skipping one token", cls.kind)
        return cls(token=read_token(stream))


class AffineComponent(PlaceholderComponent):
    kind = "AffineComponent"


class AffineComponentPreconditioned(PlaceholderComponent):
    kind = "AffineComponentPreconditioned"


class BlockAffineComponent(PlaceholderComponent):
    kind = "BlockAffineComponent"


class PermuteComponent(PlaceholderComponent):
    kind = "PermuteComponent"


class DctComponent(PlaceholderComponent):
    kind = "DctComponent"


class SumGroupComponent(PlaceholderComponent):
    kind = "SumGroupComponent"


class DropoutComponent(PlaceholderComponent):
    kind = "DropoutComponent"


class MaxoutComponent(PlaceholderComponent):
    kind = "MaxoutComponent"


class PowerComponent(PlaceholderComponent):
    kind = "PowerComponent"


class ScaleComponent(PlaceholderComponent):
    kind = "ScaleComponent"


class AdditiveNoiseComponent(PlaceholderComponent):
    kind = "AdditiveNoiseComponent"


class SpliceMaxComponent(PlaceholderComponent):
    kind = "SpliceMaxComponent"
