"""Command-line interface for inspecting and converting Kaldi binary files.

WHY: Users need a quick way to look inside archives, script files and
acoustic models, and to turn compressed archives into plain float
archives, without writing Python. The CLI is a thin wrapper over the
library; every command maps onto one or two library calls.

HOW: argparse with one sub-command per task:
  ark    → iterate_archive, print key and shape per record
  scp    → iterate_script + decode_matrix, print key and shape
  copy   → iterate_archive + encode_matrix into a new archive
  model  → load_nnet_am, print a structural summary
Data lines go to stdout; status and errors go to stderr.

RULES:
- Exit code 0 on success, 1 on any KaldiCodecError or missing input
- Logging is configured once from config.LOG_LEVEL; --verbose forces DEBUG
- copy writes float32 unless --dtype or KALDI_CODEC_WRITE_DTYPE says otherwise
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from kaldi_codec import __version__, config
from kaldi_codec.core.records import decode_matrix, decode_vector, encode_matrix
from kaldi_codec.core.stream import iterate_archive, iterate_script
from kaldi_codec.errors import KaldiCodecError
from kaldi_codec.model.ir import NnetAM
from kaldi_codec.model.loader import load_nnet_am


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _describe(value: np.ndarray) -> str:
    return "{} {}".format("x".join(str(d) for d in value.shape), value.dtype)


def _require_file(path_text: str) -> Path:
    path = Path(path_text)
    if not path.is_file():
        _status("Error: File not found: {}".format(path))
        sys.exit(1)
    return path


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_ark(args: argparse.Namespace) -> None:
    path = _require_file(args.archive)
    decoder = decode_vector if args.vectors else decode_matrix
    count = 0
    with open(path, "rb") as fd:
        for key, value in iterate_archive(fd, decoder):
            print("{} {}".format(key, _describe(value)))
            count += 1
    _status("{} record(s) in {}".format(count, path.name))


def _cmd_scp(args: argparse.Namespace) -> None:
    path = _require_file(args.script)
    count = 0
    with open(path, "r", encoding="utf-8") as fd:
        with contextlib.closing(iterate_script(fd)) as entries:
            for key, source in entries:
                print("{} {}".format(key, _describe(decode_matrix(source))))
                count += 1
    _status("{} entr{} resolved from {}".format(count, "y" if count == 1 else "ies", path.name))


def _cmd_copy(args: argparse.Namespace) -> None:
    source = _require_file(args.source)
    try:
        dtype = config.resolve_write_dtype(args.dtype)
    except ValueError as e:
        _status("Error: {}".format(e))
        sys.exit(1)

    count = 0
    with open(source, "rb") as fin, open(args.target, "wb") as fout:
        for key, matrix in iterate_archive(fin, decode_matrix):
            encode_matrix(fout, key, matrix.astype(dtype, copy=False))
            count += 1
    _status("Copied {} matrices to {} ({})".format(count, args.target, dtype))


def _summarise_model(model: NnetAM) -> List[str]:
    tm = model.transition_model
    topo = tm.topology
    lines = [
        "phones: {}".format(len(topo.phones)),
        "topology: {} ({} entries)".format("HMM" if topo.is_hmm else "non-HMM", len(topo.entries)),
        "tuples: {} {}".format(len(tm.tuples), tm.layout.value),
        "log-probs: {}".format(len(tm.log_probs)),
    ]
    if model.nnet is None:
        lines.append("nnet: nnet3 (not decoded)")
        return lines
    lines.append("components: {}".format(len(model.nnet.components)))
    for index, component in enumerate(model.nnet.components):
        lines.append("  {:3d} {}".format(index, component.kind))
    lines.append("priors: {}".format(len(model.nnet.priors)))
    return lines


def _cmd_model(args: argparse.Namespace) -> None:
    path = _require_file(args.model)
    model = load_nnet_am(path)
    for line in _summarise_model(model):
        print(line)


# ---------------------------------------------------------------------------
# Parser and entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without running commands.
    """
    parser = argparse.ArgumentParser(
        prog="kaldi_codec",
        description="Inspect and convert Kaldi binary archives, script files and nnet2 models.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    ark = sub.add_parser("ark", help="List the records of a binary archive.")
    ark.add_argument("archive", help="Path to the .ark file.")
    ark.add_argument(
        "--vectors",
        action="store_true",
        help="Records are integer vectors (alignments) instead of matrices.",
    )
    ark.set_defaults(func=_cmd_ark)

    scp = sub.add_parser("scp", help="Resolve a script file and list its matrices.")
    scp.add_argument("script", help="Path to the .scp file.")
    scp.set_defaults(func=_cmd_scp)

    copy = sub.add_parser("copy", help="Re-encode a matrix archive as FM/DM (uncompressed).")
    copy.add_argument("source", help="Input .ark file.")
    copy.add_argument("target", help="Output .ark file (overwritten).")
    copy.add_argument(
        "--dtype",
        default=None,
        choices=list(config.WRITE_DTYPES),
        help="Element type to write (default: {}).".format(config.DEFAULT_WRITE_DTYPE),
    )
    copy.set_defaults(func=_cmd_copy)

    model = sub.add_parser("model", help="Summarise an nnet2 acoustic model (.mdl).")
    model.add_argument("model", help="Path to the model file.")
    model.set_defaults(func=_cmd_model)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        args.func(args)
    except KaldiCodecError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
