"""
Tests for RF metric derivation.

This module tests:
- VSWR from forward/reflected power, including saturation
- Return loss in dB
- Cleaning of missing and non-numeric channel values
"""

import math
from types import SimpleNamespace

import pytest

from horizon_api.utils.rf import (
    VSWR_CEILING,
    VSWR_MATCHED,
    clean_value,
    derive_metrics,
    derive_return_loss,
    derive_vswr,
    reflection_coefficient,
)


class TestCleanValue:
    """Test coercion of raw channel values."""

    @pytest.mark.parametrize("raw", [None, float("nan"), float("inf"), float("-inf"), "abc", [1, 2]])
    def test_bad_values_become_zero(self, raw):
        assert clean_value(raw) == 0.0

    def test_numeric_strings_are_parsed(self):
        assert clean_value("12.5") == 12.5

    def test_numbers_pass_through(self):
        assert clean_value(7) == 7.0
        assert clean_value(-3.25) == -3.25


class TestVSWR:
    """Test VSWR derivation."""

    def test_quarter_reflection(self):
        # rho = sqrt(25 / 100) = 0.5 -> (1.5 / 0.5) = 3
        assert derive_vswr(100.0, 25.0) == pytest.approx(3.0)

    def test_small_reflection(self):
        # rho = 0.1 -> 1.1 / 0.9
        assert derive_vswr(100.0, 1.0) == pytest.approx(1.1 / 0.9)

    @pytest.mark.parametrize("forward, reflected", [
        (None, 5.0),
        (0.0, 5.0),
        (100.0, 0.0),
        (100.0, None),
        (-5.0, 1.0),
        (float("nan"), 1.0),
    ])
    def test_no_usable_signal_is_matched(self, forward, reflected):
        assert derive_vswr(forward, reflected) == VSWR_MATCHED

    def test_total_reflection_saturates(self):
        assert derive_vswr(1.0, 1.0) == VSWR_CEILING

    def test_reflected_above_forward_saturates(self):
        assert derive_vswr(10.0, 20.0) == VSWR_CEILING

    def test_large_finite_value_is_clamped(self):
        # rho just below 1 gives a VSWR around 40000
        assert derive_vswr(100.0, 99.99) == VSWR_CEILING

    def test_vswr_never_below_one(self):
        for reflected in [0.0, 0.001, 1.0, 10.0, 50.0, 99.0, 150.0]:
            assert derive_vswr(100.0, reflected) >= 1.0

    def test_vswr_grows_with_reflected_power(self):
        values = [derive_vswr(100.0, r) for r in [1.0, 4.0, 9.0, 16.0, 36.0]]
        assert values == sorted(values)

    def test_reflection_coefficient(self):
        assert reflection_coefficient(100.0, 25.0) == pytest.approx(0.5)
        assert reflection_coefficient(0.0, 25.0) is None


class TestReturnLoss:
    """Test return loss derivation."""

    def test_one_percent_reflected(self):
        assert derive_return_loss(100.0, 1.0) == pytest.approx(-20.0)

    def test_one_per_mille_reflected(self):
        assert derive_return_loss(1000.0, 1.0) == pytest.approx(-30.0)

    def test_equal_powers(self):
        assert derive_return_loss(50.0, 50.0) == pytest.approx(0.0)

    def test_missing_readings(self):
        assert derive_return_loss(100.0, 0.0) == 0.0
        assert derive_return_loss(None, 1.0) == 0.0

    def test_return_loss_not_positive_below_forward(self):
        for reflected in [0.01, 0.5, 10.0, 99.0]:
            result = derive_return_loss(100.0, reflected)
            assert result <= 0.0
            assert math.isfinite(result)


class TestDeriveMetrics:
    """Test per-reading derivation."""

    def test_from_dict(self):
        metrics = derive_metrics({"forward_power": 100.0, "reflected_power": 1.0})
        assert metrics.vswr == pytest.approx(1.1 / 0.9)
        assert metrics.return_loss == pytest.approx(-20.0)

    def test_from_object(self):
        reading = SimpleNamespace(forward_power=100.0, reflected_power=25.0)
        metrics = derive_metrics(reading)
        assert metrics.vswr == pytest.approx(3.0)

    def test_missing_channels(self):
        metrics = derive_metrics({})
        assert metrics.vswr == VSWR_MATCHED
        assert metrics.return_loss == 0.0
