"""Acoustic-model decoding: transition model, HMM topology and nnet2 network.

WHY: Model files are the most structured Kaldi format. Keeping their
value objects (ir.py) apart from the decoding logic (loader.py) lets
callers inspect models without touching byte-level code.

HOW: loader.py walks the tag grammar and builds the frozen dataclasses
from ir.py; network components come from the components registry.

RULES:
- IR objects are built once and never mutated
- Only binary nnet2 models are decoded; nnet3 yields nnet=None
"""

from kaldi_codec.model.ir import (
    HmmState,
    HmmTopology,
    HmmTransition,
    Nnet,
    NnetAM,
    TopologyEntry,
    TransitionModel,
    Triple,
    Tuple4,
    TupleLayout,
)
from kaldi_codec.model.loader import (
    decode_component,
    load_hmm_topology,
    load_nnet,
    load_nnet_am,
    load_transition_model,
)

__all__ = [
    "HmmState",
    "HmmTopology",
    "HmmTransition",
    "Nnet",
    "NnetAM",
    "TopologyEntry",
    "TransitionModel",
    "Triple",
    "Tuple4",
    "TupleLayout",
    "decode_component",
    "load_hmm_topology",
    "load_nnet",
    "load_nnet_am",
    "load_transition_model",
]
