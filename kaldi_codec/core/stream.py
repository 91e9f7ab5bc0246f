"""Lazy iteration over Kaldi archives and script files.

WHY: Archives routinely hold thousands of utterances; loading them all
before the first one is needed wastes memory, and a consumer that only
wants the first few records should not pay for the rest. Script files
add indirection: each line names where the data lives (a file, a file
at a byte offset, or a command's output).

HOW: Generators. iterate_archive reads one key and one record per pull.
iterate_script resolves one line per pull into an open byte source and
closes it when the consumer moves on. The aggregating loaders build
ordered dicts on top of the generators.

RULES:
- Forward-only; stopping early leaves the remaining bytes unread
- Script lines that do not split into ``<id> <value>`` are skipped
- Script value grammar: ``cmd args... |``, ``path:offset`` or ``path``
- Every byte source opened by iterate_script is closed on all exit paths
- Aggregation is "last write wins" for duplicate keys
"""

from __future__ import annotations

import contextlib
import functools
import io
import logging
import re
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator, Mapping, Optional, Sequence, Union

import numpy as np

from kaldi_codec import config
from kaldi_codec.core.commands import run_command
from kaldi_codec.core.primitives import at_end, read_token
from kaldi_codec.core.records import decode_matrix, decode_vector, encode_matrix
from kaldi_codec.errors import KaldiIOError, LengthMismatchError

logger = logging.getLogger(__name__)

PathOrStream = Union[str, Path, BinaryIO]

# "path:offset": the offset is the trailing run of digits after the last colon
_OFFSET_RE = re.compile(r"^(.*):(\d+)$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def _opened(source: PathOrStream, mode: str = "rb") -> Iterator[BinaryIO]:
    """Yield a binary stream for ``source``, closing it only if we opened it."""
    if isinstance(source, (str, Path)):
        try:
            fd = open(source, mode)
        except OSError as exc:
            raise KaldiIOError("Could not open {}: {}".format(source, exc)) from exc
        with fd:
            yield fd
    else:
        yield source


def _open_at_offset(path: str, offset: int) -> BinaryIO:
    try:
        fd = open(path, "rb")
    except OSError as exc:
        raise KaldiIOError("Could not open {}: {}".format(path, exc)) from exc
    if offset > 0:
        fd.seek(offset)
    return fd


def _split_script_line(line: str) -> Optional[tuple[str, str]]:
    words = line.rstrip("\r\n").split(" ", 1)
    if len(words) != 2:
        return None
    key, value = words[0].strip(), words[1].strip()
    if not value:
        return None
    return key, value


# ---------------------------------------------------------------------------
# Archives
# ---------------------------------------------------------------------------


def iterate_archive(
    stream: BinaryIO,
    decoder: Callable[[BinaryIO], Any] = decode_matrix,
) -> Iterator[tuple[str, Any]]:
    """Yield ``(key, value)`` pairs from a binary archive stream.

    WHY: This is the workhorse for reading feature archives one
    utterance at a time.

    HOW: While bytes remain, read the key token and hand the stream to
    ``decoder`` for exactly one value.

    RULES:
    - decoder is decode_matrix by default; pass decode_vector for int vectors
    - Nothing is read ahead of the record being yielded
    - A malformed record raises and ends the iteration

    Args:
        stream: Binary stream positioned at the first key.
        decoder: Function that decodes one value at the current position.

    Yields:
        (key, value) tuples in file order.
    """
    while not at_end(stream):
        key = read_token(stream)
        value = decoder(stream)
        logger.debug(
            "Decoded record %s: shape %s, dtype %s",
            key,
            getattr(value, "shape", None),
            getattr(value, "dtype", None),
        )
        yield key, value


def load_ark_matrices(source: PathOrStream) -> dict[str, np.ndarray]:
    """Read every matrix of an archive into an insertion-ordered dict."""
    with _opened(source) as fd:
        return dict(iterate_archive(fd, decode_matrix))


def load_ark_vectors(source: PathOrStream) -> dict[str, np.ndarray]:
    """Read every integer vector of an archive into an insertion-ordered dict."""
    with _opened(source) as fd:
        return dict(iterate_archive(fd, decode_vector))


def save_ark_matrices(
    target: PathOrStream,
    keys: Union[Mapping[str, np.ndarray], Sequence[str]],
    values: Optional[Sequence[np.ndarray]] = None,
) -> None:
    """Write matrices to an archive, from a mapping or parallel sequences.

    RULES:
    - save_ark_matrices(target, mapping) writes mapping items in order
    - save_ark_matrices(target, keys, values) requires equal lengths,
      else LengthMismatchError (raised before anything is written)
    - A path target is created/truncated; a stream target is left open
    """
    if values is None:
        items = list(keys.items())
    else:
        keys = list(keys)
        values = list(values)
        if len(keys) != len(values):
            raise LengthMismatchError(
                "Vector length mismatch: {} keys, {} values".format(len(keys), len(values))
            )
        items = list(zip(keys, values))
    with _opened(target, "wb") as fd:
        for key, matrix in items:
            encode_matrix(fd, key, matrix)


# ---------------------------------------------------------------------------
# Script files
# ---------------------------------------------------------------------------


def resolve_script_value(
    value: str,
    runner: Callable[[str], bytes],
) -> BinaryIO:
    """Turn one script value into an open, positioned byte source.

    WHY: Script values use three spellings for "where the data lives";
    consumers should not care which one a line used.

    HOW:
      ``cmd args... |`` → run the command, wrap its stdout in BytesIO
      ``path:offset``   → open path, seek to offset
      ``path``          → open path at offset 0

    RULES:
    - The caller owns the returned stream and must close it
    """
    if value.endswith("|"):
        command = value[:-1].strip()
        logger.debug("Script value is a command: %s", command)
        return io.BytesIO(runner(command))
    match = _OFFSET_RE.match(value)
    if match is not None:
        path, offset = match.group(1), int(match.group(2))
        logger.debug("Script value is a file at offset: %s:%d", path, offset)
        return _open_at_offset(path, offset)
    logger.debug("Script value is a file: %s", value)
    return _open_at_offset(value, 0)


def iterate_script(
    stream,
    runner: Optional[Callable[[str], bytes]] = None,
    shell: Optional[bool] = None,
) -> Iterator[tuple[str, BinaryIO]]:
    """Yield ``(key, byte_source)`` pairs for each well-formed script line.

    WHY: A script file is an index over data scattered across archives
    and commands. Each entry must be resolved lazily and released as
    soon as the consumer is done with it.

    HOW: For every line, split into id and value, resolve the value with
    resolve_script_value and yield the open source. The source is closed
    in a ``finally`` block when the consumer pulls the next item, stops
    iterating, or the generator is closed. Wrap the generator in
    ``contextlib.closing`` when the consumer may raise.

    RULES:
    - Lines without exactly two fields, or with an empty value, are skipped
    - runner defaults to run_command with the configured shell mode
    - stream may yield str or bytes lines (bytes are decoded as UTF-8)

    Args:
        stream: Text or binary stream over the script file.
        runner: Callable taking the command text and returning its stdout.
        shell: Shell mode for the default runner (default: SCRIPT_COMMAND_SHELL).

    Yields:
        (key, open binary stream positioned at the record).
    """
    if runner is None:
        use_shell = config.SCRIPT_COMMAND_SHELL if shell is None else shell
        runner = functools.partial(run_command, shell=use_shell)

    for raw in stream:
        line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        entry = _split_script_line(line)
        if entry is None:
            logger.debug("Skipping malformed script line: %r", line)
            continue
        key, value = entry
        source = resolve_script_value(value, runner)
        try:
            yield key, source
        finally:
            source.close()


def load_scp_matrices(
    source,
    runner: Optional[Callable[[str], bytes]] = None,
) -> dict[str, np.ndarray]:
    """Decode one matrix per script entry into an insertion-ordered dict."""
    if isinstance(source, (str, Path)):
        try:
            fd = open(source, "r", encoding="utf-8")
        except OSError as exc:
            raise KaldiIOError("Could not open {}: {}".format(source, exc)) from exc
    else:
        fd = source
    try:
        with contextlib.closing(iterate_script(fd, runner=runner)) as entries:
            return {key: decode_matrix(data) for key, data in entries}
    finally:
        if fd is not source:
            fd.close()
