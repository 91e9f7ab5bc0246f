"""Tests for compressed-matrix dequantization.

WHY: A wrong breakpoint or bucket width shifts every reconstructed
feature value by up to a quantile bracket, which is invisible until
recognition accuracy drops.

HOW: Boundary codes are checked against exact expected values, and the
whole 8-bit code range is swept to check continuity and bounds.
"""

import numpy as np
import pytest

from kaldi_codec.core.quantization import UINT16_MAX, dequantize8, dequantize16


class TestDequantize16:
    def test_endpoints(self):
        assert dequantize16(0, -2.5, 5.0) == np.float32(-2.5)
        assert dequantize16(UINT16_MAX, -2.5, 5.0) == np.float32(2.5)

    def test_linear_in_code(self):
        assert dequantize16(13107, 0.0, 65535.0) == pytest.approx(13107.0)

    def test_scalar_returns_float32_scalar(self):
        value = dequantize16(100, 0.0, 1.0)
        assert isinstance(value, np.float32)

    def test_array_input(self):
        codes = np.array([0, UINT16_MAX], dtype=np.uint16)
        values = dequantize16(codes, 1.0, 2.0)
        assert values.dtype == np.float32
        assert values.tolist() == [1.0, 3.0]


class TestDequantize8:
    QUANTILES = (-1.0, 0.0, 2.0, 3.0)

    @pytest.mark.parametrize(
        "code, expected",
        [(0, -1.0), (32, -0.5), (64, 0.0), (128, 1.0), (192, 2.0), (255, 3.0)],
    )
    def test_breakpoints(self, code, expected):
        assert dequantize8(code, self.QUANTILES) == pytest.approx(expected)

    def test_continuous_at_breakpoints(self):
        p0, p25, p75, p100 = self.QUANTILES
        # Just past each breakpoint the next piece starts from the same value
        step_mid = (p75 - p25) / 128.0
        step_high = (p100 - p75) / 63.0
        assert dequantize8(65, self.QUANTILES) == pytest.approx(p25 + step_mid)
        assert dequantize8(193, self.QUANTILES) == pytest.approx(p75 + step_high)

    def test_sweep_is_monotone_and_bounded(self):
        codes = np.arange(256, dtype=np.uint8)
        values = dequantize8(codes, self.QUANTILES)
        assert values.dtype == np.float32
        assert np.all(np.diff(values) >= 0)
        assert values.min() == np.float32(-1.0)
        assert values.max() == np.float32(3.0)

    def test_identity_brackets(self):
        codes = np.arange(256)
        values = dequantize8(codes, (0.0, 64.0, 192.0, 255.0))
        np.testing.assert_allclose(values, codes.astype(np.float32))

    def test_per_column_brackets_broadcast(self):
        codes = np.array([[0, 255], [0, 255]], dtype=np.uint8)
        quantiles = (
            np.array([[0.0], [10.0]]),
            np.array([[1.0], [11.0]]),
            np.array([[2.0], [12.0]]),
            np.array([[3.0], [13.0]]),
        )
        values = dequantize8(codes, quantiles)
        assert values.tolist() == [[0.0, 3.0], [10.0, 13.0]]
