"""Typed exceptions raised while decoding or encoding Kaldi binary data.

WHY: Callers need to tell a malformed file apart from an unsupported
variant, an unknown network component, or a plain I/O failure. One
exception class per failure kind makes that distinction explicit.

HOW: Every exception derives from KaldiCodecError so a caller can catch
the whole family in one clause. Classes that also describe a builtin
failure category (ValueError, OSError) inherit from it as well.

RULES:
- All decode-time errors are fatal for the current stream
- FormatError carries both the expected and the actual token
- UnknownComponentError names the offending component kind
- KaldiIOError is raised ``from`` the underlying OSError/process failure
"""

from __future__ import annotations


class KaldiCodecError(Exception):
    """Base class for every error raised by kaldi_codec."""


class FormatError(KaldiCodecError):
    """Raised when the stream does not match the expected binary layout.

    WHY: Kaldi files are a sequence of tags and values; a tag that does
    not match, or a stream that ends early, means the file is corrupt or
    of a different kind than the caller assumed.

    HOW: ``expect_token`` raises it with both tokens; truncated reads and
    invalid branch tokens raise it with a descriptive message only.

    RULES:
    - expected / actual are None when the error is not a token mismatch
    """

    def __init__(
        self,
        message: str,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class UnsupportedFormatError(KaldiCodecError):
    """Raised for valid-looking input that this codec does not handle.

    Text-mode files, width bytes other than 4 or 8, unknown tagged-array
    codes and unsupported element types for writing all end up here.
    """


class UnknownFormatError(UnsupportedFormatError):
    """Raised when an archive record carries an unknown matrix type token."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Unknown matrix type token {token!r}")


class UnknownComponentError(KaldiCodecError):
    """Raised when an nnet component tag is not in the COMPONENTS table.

    WHY: The set of decodable component kinds is closed. An unknown tag
    means the model uses a component this codec cannot step over, so the
    rest of the stream cannot be located.

    RULES:
    - kind is the tag with its angle brackets stripped
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown nnet component {kind!r}")


class LengthMismatchError(KaldiCodecError, ValueError):
    """Raised when parallel key and value sequences differ in length."""


class KaldiIOError(KaldiCodecError, OSError):
    """Raised when a file cannot be opened or a script command fails."""
