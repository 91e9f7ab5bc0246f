"""Value objects for decoded Kaldi acoustic models.

WHY: A Kaldi nnet2 acoustic-model file holds a transition model (HMM
topology plus transition tuples and log-probabilities) followed by a
neural network. Callers need these as typed, read-only structures rather
than nested lists of numbers.

HOW: Frozen dataclasses, built in one pass by the loader and never
mutated afterwards:
  HmmTransition   : one arc (target state, log-prob)
  HmmState        : pdf-class, optional self-loop pdf-class, arcs
  TopologyEntry   : the states of one phone's HMM
  HmmTopology     : phone list, phone→entry index, entries, is_hmm flag
  Triple / Tuple4 : one transition-state tuple, 3- or 4-field
  TransitionModel : topology, tuple layout, tuples, log-probs
  Nnet            : ordered components and class priors
  NnetAM          : transition model plus network

RULES:
- Collections are tuples; arrays are numpy arrays owned by the object
- self_loop_pdf_class is set only for non-HMM topologies
- Exactly one tuple layout applies per model (TupleLayout)
- NnetAM.nnet is None when the file holds an unsupported <Nnet3> network
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from kaldi_codec.components.base import NnetComponent


@dataclass(frozen=True)
class HmmTransition:
    """One outgoing arc of an HMM state."""

    target_state: int
    log_prob: float


@dataclass(frozen=True)
class HmmState:
    """One HMM state of a phone topology.

    RULES:
    - pdf_class: forward pdf-class (or the only pdf-class for HMM topologies)
    - self_loop_pdf_class: None unless the topology is non-HMM
    - transitions: arcs in file order
    """

    pdf_class: int
    transitions: tuple[HmmTransition, ...] = ()
    self_loop_pdf_class: Optional[int] = None


@dataclass(frozen=True)
class TopologyEntry:
    """The ordered states of one phone's HMM."""

    states: tuple[HmmState, ...]


@dataclass(frozen=True, eq=False)
class HmmTopology:
    """HMM topologies for every phone of the model.

    RULES:
    - phones: sorted phone ids (int32 array)
    - phone_to_entry_index: for phone p, entries[phone_to_entry_index[p]]
      is its topology (int32 array, -1 for unused ids)
    - is_hmm: False when the file used the -1 sentinel (non-HMM topology)
    """

    phones: np.ndarray
    phone_to_entry_index: np.ndarray
    entries: tuple[TopologyEntry, ...]
    is_hmm: bool = True

    def entry_for_phone(self, phone: int) -> TopologyEntry:
        """Return the topology entry of ``phone``.

        RULES:
        - Raises KeyError for a phone id outside the index or mapped to -1
        """
        if not 0 <= phone < len(self.phone_to_entry_index):
            raise KeyError("Phone {} has no topology entry".format(phone))
        index = int(self.phone_to_entry_index[phone])
        if not 0 <= index < len(self.entries):
            raise KeyError("Phone {} has no topology entry".format(phone))
        return self.entries[index]


class TupleLayout(str, enum.Enum):
    """Which transition-tuple block a model carries.

    RULES:
    - TRIPLES: older models, (phone, hmm_state, pdf_class)
    - TUPLES: (phone, hmm_state, forward_pdf_class, self_loop_pdf_class)
    - The value is the opening tag as written in the file
    """

    TRIPLES = "<Triples>"
    TUPLES = "<Tuples>"

    @property
    def closing_tag(self) -> str:
        return "</" + self.value[1:]

    @property
    def arity(self) -> int:
        return 3 if self is TupleLayout.TRIPLES else 4


@dataclass(frozen=True)
class Triple:
    """Transition-state triple from a <Triples> block."""

    phone: int
    hmm_state: int
    pdf_class: int


@dataclass(frozen=True)
class Tuple4:
    """Transition-state tuple from a <Tuples> block.

    RULES:
    - Field order is the order Kaldi's TransitionModel::Write emits:
      phone, hmm_state, forward_pdf_class, self_loop_pdf_class
    """

    phone: int
    hmm_state: int
    forward_pdf_class: int
    self_loop_pdf_class: int


TransitionTuple = Union[Triple, Tuple4]


@dataclass(frozen=True, eq=False)
class TransitionModel:
    """Topology, transition-state tuples and transition log-probabilities."""

    topology: HmmTopology
    layout: TupleLayout
    tuples: tuple[TransitionTuple, ...]
    log_probs: np.ndarray


@dataclass(frozen=True, eq=False)
class Nnet:
    """An nnet2 network: components in evaluation order plus class priors."""

    components: tuple[NnetComponent, ...]
    priors: np.ndarray


@dataclass(frozen=True, eq=False)
class NnetAM:
    """A complete nnet2 acoustic model.

    RULES:
    - nnet is None when the network block was <Nnet3> (not decoded)
    """

    transition_model: TransitionModel
    nnet: Optional[Nnet]
