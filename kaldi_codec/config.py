"""Configuration constants and .env loading.

WHY: A few behaviours depend on the environment the codec runs in:
how verbose logging is, whether script-file commands may use shell
pipelines, and which float width the CLI writes by default. Keeping
them in one module makes them easy to find and override.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values read through os.getenv with documented defaults.

RULES:
- Every setting has a default; the codec works without a .env file
- Environment variables are prefixed with KALDI_CODEC_
- resolve_write_dtype() is the only place the write dtype is validated
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the directory the tool is run from
load_dotenv()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("KALDI_CODEC_LOG_LEVEL", "WARNING").upper()

# ---------------------------------------------------------------------------
# Script-file commands
# ---------------------------------------------------------------------------

SCRIPT_COMMAND_SHELL = os.getenv("KALDI_CODEC_SCRIPT_SHELL", "false").lower() == "true"
"""Run ``cmd args... |`` script values through the shell (inner pipes allowed)."""

# ---------------------------------------------------------------------------
# Archive writing
# ---------------------------------------------------------------------------

WRITE_DTYPES = ("float32", "float64")

DEFAULT_WRITE_DTYPE = os.getenv("KALDI_CODEC_WRITE_DTYPE", "float32").lower()


def resolve_write_dtype(name: str | None = None) -> str:
    """Return a validated element type name for archive writing.

    WHY: Kaldi archives only hold FM (float32) and DM (float64) dense
    matrices. A typo in the environment should fail loudly before any
    output file is created.

    HOW: Falls back to DEFAULT_WRITE_DTYPE when name is None, then
    checks membership in WRITE_DTYPES.

    RULES:
    - Raises ValueError for anything other than float32 / float64
    """
    dtype = (name or DEFAULT_WRITE_DTYPE).lower()
    if dtype not in WRITE_DTYPES:
        raise ValueError(
            "Unsupported write dtype '{}'. Use one of: {}".format(dtype, ", ".join(WRITE_DTYPES))
        )
    return dtype
