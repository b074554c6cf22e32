"""
RF metric derivation for transmitter telemetry.

This module turns raw forward/reflected power readings into the engineering
quantities shown on the dashboard:
- Voltage Standing Wave Ratio (VSWR)
- Return loss (dB)

Conventions:
- Missing readings (None, NaN) count as 0, the same as everywhere else in the
  telemetry pipeline.
- Without a positive forward AND reflected reading there is nothing to
  compare, so VSWR falls back to 1 (matched / no signal) and return loss to 0.
- Return loss is reported as 10 * log10(Pr / Pf): negative for a normal
  transmitter, more negative means a better match.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional


# Upper bound reported when reflected power reaches forward power (rho -> 1).
VSWR_CEILING = 99.99

# VSWR reported when there is no usable reading.
VSWR_MATCHED = 1.0


@dataclass(frozen=True)
class DerivedMetrics:
    """Quantities computed from one reading."""

    vswr: float
    return_loss: float


def clean_value(value: Any) -> float:
    """
    Coerce a raw channel value to a finite float.

    None, NaN, infinities and non-numeric values become 0.0.

    Example:
        >>> clean_value(None)
        0.0
        >>> clean_value("12.5")
        12.5
    """
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def reflection_coefficient(forward_power: Any, reflected_power: Any) -> Optional[float]:
    """
    Magnitude of the reflection coefficient, rho = sqrt(Pr / Pf).

    Returns:
        rho, or None when either power is not positive
    """
    forward = clean_value(forward_power)
    reflected = clean_value(reflected_power)
    if forward <= 0 or reflected <= 0:
        return None
    return math.sqrt(reflected / forward)


def derive_vswr(forward_power: Any, reflected_power: Any) -> float:
    """
    Calculate VSWR from forward and reflected power.

    VSWR = (1 + rho) / (1 - rho), rho = sqrt(Pr / Pf)

    Total reflection (rho >= 1) has no finite VSWR, so the result saturates at
    VSWR_CEILING. The same ceiling caps finite values that exceed it.

    Args:
        forward_power: Forward power in W (may be None, zero or negative)
        reflected_power: Reflected power in W (may be None, zero or negative)

    Returns:
        VSWR in [1, VSWR_CEILING]

    Example:
        >>> derive_vswr(100.0, 1.0)  # rho = 0.1
        1.2222222222222223
        >>> derive_vswr(1.0, 0.0)
        1.0
    """
    rho = reflection_coefficient(forward_power, reflected_power)
    if rho is None:
        return VSWR_MATCHED
    if rho >= 1.0:
        return VSWR_CEILING
    return min((1.0 + rho) / (1.0 - rho), VSWR_CEILING)


def derive_return_loss(forward_power: Any, reflected_power: Any) -> float:
    """
    Calculate return loss in dB.

    RL = 10 * log10(Pr / Pf) = 20 * log10(rho)

    Args:
        forward_power: Forward power in W
        reflected_power: Reflected power in W

    Returns:
        Return loss in dB (<= 0 while Pr < Pf), or 0.0 without usable readings

    Example:
        >>> derive_return_loss(100.0, 1.0)
        -20.0
    """
    forward = clean_value(forward_power)
    reflected = clean_value(reflected_power)
    if forward <= 0 or reflected <= 0:
        return 0.0
    return 10.0 * math.log10(reflected / forward)


def _channel(reading: Any, name: str) -> Any:
    if isinstance(reading, dict):
        return reading.get(name)
    return getattr(reading, name, None)


def derive_metrics(reading: Any) -> DerivedMetrics:
    """
    Compute derived metrics for a single reading.

    Accepts an ORM row, a schema object or a plain dict exposing
    ``forward_power`` and ``reflected_power``.
    """
    forward = _channel(reading, "forward_power")
    reflected = _channel(reading, "reflected_power")
    return DerivedMetrics(
        vswr=derive_vswr(forward, reflected),
        return_loss=derive_return_loss(forward, reflected),
    )
