"""
Summary statistics and trend classification for telemetry series.

A series is an ordered list of channel values with one timestamp per value.
The summary reports:
- min / max / average
- population standard deviation (divide by N)
- timestamp of the first occurrence of the max and min values
- a trend over the most recent samples (stable / increasing / decreasing)

Readings are not guaranteed to arrive ordered or unique, so values are sorted
by timestamp before anything is computed. Bad numeric values never raise:
they are counted as 0.
"""

import enum
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from horizon_api.core.exceptions import InvalidInput
from horizon_api.utils.rf import clean_value


# Number of most recent samples the trend looks at
TREND_WINDOW = 10

# Minimum samples required to classify a trend
TREND_MIN_SAMPLES = 2

# Changes smaller than this (in percent) are reported as stable
TREND_STABLE_THRESHOLD = 5.0


class Trend(str, enum.Enum):
    """Qualitative trend classification."""

    STABLE = "stable"
    INCREASING = "increasing"
    DECREASING = "decreasing"
    INSUFFICIENT_DATA = "insufficient data"


@dataclass(frozen=True)
class MetricSummary:
    """Statistics for one metric over one report window."""

    min: float = 0.0
    max: float = 0.0
    average: float = 0.0
    standard_deviation: float = 0.0
    trend: Trend = Trend.INSUFFICIENT_DATA
    percent_change: Optional[float] = None
    max_timestamp: Optional[datetime] = None
    min_timestamp: Optional[datetime] = None
    count: int = 0

    @property
    def trend_label(self) -> str:
        """Short label, e.g. ``"increasing (+100.0%)"``."""
        if self.trend in (Trend.INCREASING, Trend.DECREASING):
            return f"{self.trend.value} ({self.percent_change:+.1f}%)"
        return self.trend.value

    @property
    def trend_description(self) -> str:
        """Sentence describing the trend, used in narrations."""
        if self.trend == Trend.INCREASING:
            return (
                f"There is an increasing trend with a {abs(self.percent_change):.1f}% "
                "rise in recent measurements."
            )
        if self.trend == Trend.DECREASING:
            return (
                f"There is a decreasing trend with a {abs(self.percent_change):.1f}% "
                "drop in recent measurements."
            )
        if self.trend == Trend.STABLE:
            return "The measurements have remained relatively stable recently."
        return "Insufficient data for trend analysis."


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (divides by N, not N-1)."""
    if not values:
        return 0.0
    avg = _mean(values)
    return math.sqrt(sum((v - avg) ** 2 for v in values) / len(values))


def classify_trend(values: Sequence[float]) -> Tuple[Trend, Optional[float]]:
    """
    Classify the trend of the most recent samples.

    The last TREND_WINDOW values are split into two equal halves (the middle
    value is left out when the window is odd) and the half averages compared:

        change % = (second_avg - first_avg) / |first_avg| * 100

    A zero baseline has no meaningful percentage: two all-zero halves are
    stable, anything else is reported as insufficient data.

    Args:
        values: Series in chronological order

    Returns:
        Tuple of (Trend, signed percent change rounded to 0.1 or None)
    """
    if len(values) < TREND_MIN_SAMPLES:
        return Trend.INSUFFICIENT_DATA, None

    window = list(values[-TREND_WINDOW:])
    half = len(window) // 2
    first_avg = _mean(window[:half])
    second_avg = _mean(window[-half:])

    if first_avg == 0:
        if second_avg == 0:
            return Trend.STABLE, 0.0
        return Trend.INSUFFICIENT_DATA, None

    percent_change = (second_avg - first_avg) / abs(first_avg) * 100
    rounded = round(percent_change, 1)

    if abs(percent_change) < TREND_STABLE_THRESHOLD:
        return Trend.STABLE, rounded
    if percent_change > 0:
        return Trend.INCREASING, rounded
    return Trend.DECREASING, rounded


def summarize(values: Sequence, timestamps: Sequence[datetime]) -> MetricSummary:
    """
    Summarize one metric series.

    Args:
        values: Channel values (None/NaN are counted as 0)
        timestamps: One timestamp per value, in any order

    Returns:
        MetricSummary; all zeros with an insufficient-data trend when empty

    Raises:
        InvalidInput: If values and timestamps differ in length

    Example:
        >>> s = summarize([1, 1, 1, 1, 1, 2, 2, 2, 2, 2], stamps)
        >>> s.trend, s.percent_change
        (<Trend.INCREASING: 'increasing'>, 100.0)
    """
    if values is None or timestamps is None:
        raise InvalidInput("values and timestamps are required")
    if len(values) != len(timestamps):
        raise InvalidInput(
            f"Series length mismatch: {len(values)} values, {len(timestamps)} timestamps"
        )
    if len(values) == 0:
        return MetricSummary()

    # Stable sort keeps the original order of duplicate timestamps
    try:
        pairs = sorted(
            zip(timestamps, (clean_value(v) for v in values)),
            key=lambda pair: pair[0],
        )
    except TypeError:
        raise InvalidInput("timestamps mix timezone-aware and naive values")
    ordered = [value for _, value in pairs]

    max_value = max(ordered)
    min_value = min(ordered)
    # list.index returns the earliest occurrence
    max_timestamp = pairs[ordered.index(max_value)][0]
    min_timestamp = pairs[ordered.index(min_value)][0]

    trend, percent_change = classify_trend(ordered)

    return MetricSummary(
        min=min_value,
        max=max_value,
        average=_mean(ordered),
        standard_deviation=population_std(ordered),
        trend=trend,
        percent_change=percent_change,
        max_timestamp=max_timestamp,
        min_timestamp=min_timestamp,
        count=len(ordered),
    )
