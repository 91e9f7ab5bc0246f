"""Fixed per-dimension scaling component."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, ClassVar

import numpy as np

from kaldi_codec.components.base import NnetComponent
from kaldi_codec.core.arrays import decode_tagged_array


@dataclass(frozen=True, eq=False)
class FixedScaleComponent(NnetComponent):
    """Multiplies each input dimension by a fixed scale."""

    kind: ClassVar[str] = "FixedScaleComponent"

    scales: np.ndarray

    @classmethod
    def read(cls, stream: BinaryIO) -> FixedScaleComponent:
        return cls(scales=decode_tagged_array(stream, "<Scales>"))
