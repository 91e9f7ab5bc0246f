"""Structured decoder for Kaldi nnet2 acoustic-model files.

WHY: An nnet2 ``final.mdl`` is a binary marker, a <TransitionModel>
block and a network block, all written as nested bracketed tags. Tools
that inspect or convert models need the whole structure, decoded in
order, with a clear error at the first byte that does not fit.

HOW: One function per block, each consuming exactly its own tags:
  load_nnet_am           → marker, transition model, network
  load_transition_model  → <TransitionModel> topology tuples log-probs
  load_hmm_topology      → <Topology> phones, index, entries
  load_nnet              → <Nnet> components priors, or <Nnet3>
  decode_component       → <Kind> fields </Kind> via COMPONENTS

RULES:
- Every opening tag is matched by its identical closing tag
- <Triples> or <Tuples> picks the tuple layout once for the whole model
- A topology entry count of -1 marks a non-HMM topology; the real count
  follows and every state also carries a self-loop pdf-class
- <Nnet3> is not decoded: load_nnet returns None and logs a warning
- An unknown component tag raises UnknownComponentError
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from kaldi_codec.components import COMPONENTS
from kaldi_codec.components.base import NnetComponent
from kaldi_codec.core.arrays import decode_tagged_array
from kaldi_codec.core.primitives import (
    check_binary_marker,
    expect_token,
    read_float,
    read_int,
    read_token,
    read_typed_vector,
)
from kaldi_codec.errors import FormatError, KaldiIOError, UnknownComponentError
from kaldi_codec.model.ir import (
    HmmState,
    HmmTopology,
    HmmTransition,
    Nnet,
    NnetAM,
    TopologyEntry,
    TransitionModel,
    TransitionTuple,
    Triple,
    Tuple4,
    TupleLayout,
)

logger = logging.getLogger(__name__)

NON_HMM_SENTINEL = -1


# ---------------------------------------------------------------------------
# Transition model
# ---------------------------------------------------------------------------


def _read_state(stream: BinaryIO, is_hmm: bool) -> HmmState:
    pdf_class = read_int(stream)
    self_loop_pdf_class = None if is_hmm else read_int(stream)
    num_transitions = read_int(stream)
    transitions = tuple(
        HmmTransition(target_state=read_int(stream), log_prob=read_float(stream))
        for _ in range(num_transitions)
    )
    return HmmState(
        pdf_class=pdf_class,
        transitions=transitions,
        self_loop_pdf_class=self_loop_pdf_class,
    )


def load_hmm_topology(stream: BinaryIO) -> HmmTopology:
    """Decode a <Topology> block.

    WHY: The topology says, for every phone, which HMM states exist,
    which pdf-class each state emits and which arcs leave it.

    HOW: Reads the phone list and the phone→entry index as int32
    vectors, then the entry count. A count of -1 switches to the
    non-HMM layout and the real count is read next. Each entry is a
    state count followed by the states.

    RULES:
    - The -1 sentinel is checked exactly once, before any entry
    - Non-HMM states read pdf_class, then self_loop_pdf_class
    - Ends with </Topology>

    Args:
        stream: Binary stream positioned at ``<Topology>``.

    Returns:
        The decoded HmmTopology.
    """
    expect_token(stream, "<Topology>")
    phones = read_typed_vector(stream, "int32")
    phone_to_entry_index = read_typed_vector(stream, "int32")

    num_entries = read_int(stream)
    is_hmm = True
    if num_entries == NON_HMM_SENTINEL:
        is_hmm = False
        num_entries = read_int(stream)

    entries: list[TopologyEntry] = []
    for _ in range(num_entries):
        num_states = read_int(stream)
        states = tuple(_read_state(stream, is_hmm) for _ in range(num_states))
        entries.append(TopologyEntry(states=states))

    expect_token(stream, "</Topology>")
    return HmmTopology(
        phones=phones,
        phone_to_entry_index=phone_to_entry_index,
        entries=tuple(entries),
        is_hmm=is_hmm,
    )


def _read_tuple(stream: BinaryIO, layout: TupleLayout) -> TransitionTuple:
    if layout is TupleLayout.TRIPLES:
        return Triple(
            phone=read_int(stream),
            hmm_state=read_int(stream),
            pdf_class=read_int(stream),
        )
    return Tuple4(
        phone=read_int(stream),
        hmm_state=read_int(stream),
        forward_pdf_class=read_int(stream),
        self_loop_pdf_class=read_int(stream),
    )


def load_transition_model(stream: BinaryIO) -> TransitionModel:
    """Decode a <TransitionModel> block.

    HOW: Topology, then a <Triples> or <Tuples> block (count + tuples),
    then <LogProbs> holding a tagged vector.

    RULES:
    - The tuple tag decides the layout for every tuple of the model
    - Any other tag after the topology is a FormatError
    """
    expect_token(stream, "<TransitionModel>")
    topology = load_hmm_topology(stream)

    token = read_token(stream)
    try:
        layout = TupleLayout(token)
    except ValueError:
        raise FormatError(
            "Expected <Triples> or <Tuples>, saw {}".format(token),
            expected="<Tuples>",
            actual=token,
        ) from None
    num_tuples = read_int(stream)
    tuples = tuple(_read_tuple(stream, layout) for _ in range(num_tuples))
    expect_token(stream, layout.closing_tag)

    log_probs = decode_tagged_array(stream, "<LogProbs>")
    expect_token(stream, "</LogProbs>")
    expect_token(stream, "</TransitionModel>")
    return TransitionModel(
        topology=topology,
        layout=layout,
        tuples=tuples,
        log_probs=log_probs,
    )


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


def decode_component(stream: BinaryIO) -> NnetComponent:
    """Decode one bracketed component through the COMPONENTS table.

    RULES:
    - The opening tag minus its brackets is the registry key
    - An unregistered kind raises UnknownComponentError naming it
    - The matching closing tag must follow the component's fields
    """
    tag = read_token(stream)
    kind = tag[1:-1] if tag.startswith("<") and tag.endswith(">") else tag
    component_cls = COMPONENTS.get(kind)
    if component_cls is None:
        raise UnknownComponentError(kind)
    component = component_cls.read(stream)
    expect_token(stream, "</{}>".format(kind))
    logger.debug("Decoded component %s", kind)
    return component


def load_nnet(stream: BinaryIO) -> Optional[Nnet]:
    """Decode the network block that follows the transition model.

    WHY: nnet2 models hold a flat list of components; the newer nnet3
    graph format uses a different layout that is not decoded here.

    HOW: <Nnet> <NumComponents> n <Components>, n bracketed components,
    </Components> </Nnet>, then the priors as a tagged vector.

    RULES:
    - <Nnet3> returns None (no data); callers must check
    - Any other opening tag is a FormatError

    Args:
        stream: Binary stream positioned at the network tag.

    Returns:
        The decoded Nnet, or None for an nnet3 network.
    """
    token = read_token(stream)
    if token == "<Nnet3>":
        logger.warning("Nnet3 networks are not supported; no network data returned")
        return None
    if token != "<Nnet>":
        raise FormatError(
            "Expected <Nnet> or <Nnet3>, saw {}".format(token),
            expected="<Nnet>",
            actual=token,
        )

    num_components = read_int(stream, "<NumComponents>")
    expect_token(stream, "<Components>")
    components = tuple(decode_component(stream) for _ in range(num_components))
    expect_token(stream, "</Components>")
    expect_token(stream, "</Nnet>")
    priors = decode_tagged_array(stream)
    return Nnet(components=components, priors=priors)


def load_nnet_am(source: Union[str, Path, BinaryIO]) -> NnetAM:
    """Decode a complete nnet2 acoustic model.

    Args:
        source: Path to a ``.mdl`` file, or a binary stream at its start.

    Returns:
        NnetAM with the transition model and the network (None for nnet3).
    """
    if isinstance(source, (str, Path)):
        try:
            fd = open(source, "rb")
        except OSError as exc:
            raise KaldiIOError("Could not open {}: {}".format(source, exc)) from exc
        with fd:
            return load_nnet_am(fd)

    check_binary_marker(source)
    transition_model = load_transition_model(source)
    nnet = load_nnet(source)
    return NnetAM(transition_model=transition_model, nnet=nnet)
