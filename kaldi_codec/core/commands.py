"""Run an external command and capture its standard output.

WHY: Script files may point at data produced on the fly
(``utt1 compute-feats wav.scp - |``). The codec only needs the bytes
the command writes; how the process is launched is an implementation
detail kept behind one function.

HOW: subprocess.run with stdout captured and stderr passed through to
the caller's stderr. The whole output is buffered before returning.

RULES:
- Blocks until the command exits; there is no timeout
- A missing executable or a non-zero exit raises KaldiIOError
- shell=False splits the command text with shlex; shell=True hands it
  to the shell so inner pipelines work
"""

from __future__ import annotations

import logging
import shlex
import subprocess

from kaldi_codec.errors import KaldiIOError

logger = logging.getLogger(__name__)


def run_command(command: str, shell: bool = False) -> bytes:
    """Run ``command`` and return everything it wrote to stdout."""
    args = command if shell else shlex.split(command)
    if not args:
        raise KaldiIOError("Empty command")
    logger.debug("Running command: %s", command)
    try:
        completed = subprocess.run(args, shell=shell, stdout=subprocess.PIPE, check=False)
    except OSError as exc:
        raise KaldiIOError("Could not run command {!r}: {}".format(command, exc)) from exc
    if completed.returncode != 0:
        raise KaldiIOError(
            "Command {!r} exited with status {}".format(command, completed.returncode)
        )
    return completed.stdout
