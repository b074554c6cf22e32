"""
Time-window resolution for telemetry queries.

Relative periods ("1h", "24h", "7d", "30d") are anchored on the most recent
reading actually stored for the station, not on the wall clock. Stations
report intermittently, and a window ending "now" would often be empty for a
station that went quiet a few days ago.

The "custom" period takes explicit start/end dates. The end date is
inclusive: its time of day is pushed to 23:59:59.999.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from horizon_api.core.exceptions import InvalidPeriod, InvalidRange


CUSTOM_PERIOD = "custom"

PERIOD_DURATIONS = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}

VALID_PERIODS = tuple(PERIOD_DURATIONS) + (CUSTOM_PERIOD,)

END_OF_DAY = time(23, 59, 59, 999000)

DateLike = Union[date, datetime, str]


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive query range."""

    start: datetime
    end: datetime
    period: str

    def __post_init__(self):
        try:
            reversed_range = self.end < self.start
        except TypeError:
            raise InvalidRange("Range mixes timezone-aware and naive datetimes") from None
        if reversed_range:
            raise InvalidRange(
                f"End of range ({self.end.isoformat()}) is before its start ({self.start.isoformat()})"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def parse_date_like(value: DateLike, field: str) -> datetime:
    """
    Parse a date/datetime/ISO string into a datetime.

    A bare date becomes midnight of that day.

    Raises:
        InvalidRange: If the value is missing or cannot be parsed
    """
    if value is None or value == "":
        raise InvalidRange(f"{field} is required for a custom period")
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return datetime.combine(date.fromisoformat(text), time.min)
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidRange(f"Unparseable {field}: {value!r}") from None
    raise InvalidRange(f"Unsupported {field} type: {type(value).__name__}")


def end_of_day(moment: datetime) -> datetime:
    """Advance a datetime to 23:59:59.999 of the same calendar day."""
    return moment.replace(
        hour=END_OF_DAY.hour,
        minute=END_OF_DAY.minute,
        second=END_OF_DAY.second,
        microsecond=END_OF_DAY.microsecond,
    )


def resolve_window(
    period: str,
    explicit_start: Optional[DateLike] = None,
    explicit_end: Optional[DateLike] = None,
    latest_timestamp: Optional[datetime] = None,
) -> Optional[TimeWindow]:
    """
    Resolve a period token into a concrete time window.

    Args:
        period: One of "1h", "24h", "7d", "30d", "custom"
        explicit_start: Start date for "custom"
        explicit_end: End date for "custom" (inclusive, whole day)
        latest_timestamp: Most recent reading time stored for the station

    Returns:
        TimeWindow, or None for a relative period when the station has no
        data at all (callers return an empty result instead of querying)

    Raises:
        InvalidPeriod: If the token is not recognized
        InvalidRange: If a custom range is missing, unparseable or reversed

    Example:
        >>> resolve_window("24h", latest_timestamp=datetime(2025, 2, 3, 12))
        TimeWindow(start=datetime(2025, 2, 2, 12, 0), end=datetime(2025, 2, 3, 12, 0), period='24h')
    """
    if period == CUSTOM_PERIOD:
        start = parse_date_like(explicit_start, "start date")
        end = end_of_day(parse_date_like(explicit_end, "end date"))
        return TimeWindow(start=start, end=end, period=period)

    duration = PERIOD_DURATIONS.get(period)
    if duration is None:
        raise InvalidPeriod(period, VALID_PERIODS)

    if latest_timestamp is None:
        return None

    return TimeWindow(
        start=latest_timestamp - duration,
        end=latest_timestamp,
        period=period,
    )
