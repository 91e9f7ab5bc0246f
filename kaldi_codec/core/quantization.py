"""Reconstruction of float values from Kaldi compressed-matrix codes.

WHY: Kaldi's compressed matrix ("CM") stores a global range as 16-bit
codes and every sample as an 8-bit code placed inside its column's
quantile bracket. Decoding needs the two inverse maps and nothing else.

HOW: Pure numpy functions. Both accept a scalar code or an array of
codes, compute in float64 and return float32 of the same shape.

RULES:
- dequantize16: min_value + range * code / 65535
- dequantize8: piecewise linear over (p0, p25, p75, p100) with
  breakpoints at codes 64 and 192 and bucket widths 64, 128, 63
- Quantiles are assumed monotone; nothing here enforces it
"""

from __future__ import annotations

import numpy as np

UINT16_MAX = 65535

_LOW_BREAK = 64
_HIGH_BREAK = 192
_LOW_WIDTH = 64.0
_MID_WIDTH = 128.0
_HIGH_WIDTH = 63.0


def dequantize16(code, min_value, range_):
    """Map a 16-bit code linearly onto [min_value, min_value + range_]."""
    fraction = np.asarray(code, dtype=np.float64) / UINT16_MAX
    value = np.float64(min_value) + np.float64(range_) * fraction
    return value.astype(np.float32)[()]


def dequantize8(code, quantiles):
    """Map an 8-bit code onto its column's quantile brackets.

    WHY: The 8-bit quantizer spends half of its codes on the central
    25%-75% band, so reconstruction is three linear pieces rather than
    one.

    HOW: Codes 0..64 interpolate p0→p25, 65..192 interpolate p25→p75,
    193..255 interpolate p75→p100. With array input the quantiles may be
    arrays that broadcast against the codes (one bracket per column).

    RULES:
    - Continuous at both breakpoints: code 64 gives p25, code 192 gives p75
    - Result is float32

    Args:
        code: uint8 code or array of codes.
        quantiles: sequence (p0, p25, p75, p100); scalars or broadcastable arrays.

    Returns:
        Reconstructed value(s) as float32.
    """
    p0, p25, p75, p100 = (np.asarray(q, dtype=np.float64) for q in quantiles)
    x = np.asarray(code, dtype=np.float64)
    low = p0 + (p25 - p0) * (x / _LOW_WIDTH)
    mid = p25 + (p75 - p25) * ((x - _LOW_BREAK) / _MID_WIDTH)
    high = p75 + (p100 - p75) * ((x - _HIGH_BREAK) / _HIGH_WIDTH)
    value = np.where(x <= _LOW_BREAK, low, np.where(x <= _HIGH_BREAK, mid, high))
    return value.astype(np.float32)[()]
