"""
Station report orchestration.

Pipeline for one station and one period:
1. Resolve the period into a window anchored on the station's latest reading
2. Fetch the readings in that window from a ReadingSource
3. Build per-metric series (sorted by time, missing values as 0, derived
   VSWR/return loss per row)
4. Summarize every metric
5. Generate the narration

The reading source is passed in, so the same pipeline runs against a database
session, a test double, or rows loaded by a script.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from horizon_api.core.exceptions import InvalidInput, InvalidPeriod
from horizon_api.utils.logging_config import get_logger
from horizon_api.utils.narration import (
    ALL_METRICS,
    NETWORK_METRICS,
    REQUIRED_METRICS,
    NarrationFormat,
    NarrationReport,
    generate_narration,
    render,
)
from horizon_api.utils.rf import clean_value, derive_return_loss, derive_vswr
from horizon_api.utils.statistics import MetricSummary, summarize
from horizon_api.utils.time_window import (
    CUSTOM_PERIOD,
    VALID_PERIODS,
    DateLike,
    TimeWindow,
    resolve_window,
)

logger = get_logger(__name__)

# Raw channels stored on every reading
RAW_CHANNELS = ("forward_power", "reflected_power", "temperature", "voltage", "current", "power")


class ReadingSource(Protocol):
    """
    Where readings come from (database session, fixture, file).

    A source that caps its reads may set ``truncated`` after fetch_readings
    when older readings of the window were left out.
    """

    async def latest_timestamp(self, node_name: str) -> Optional[datetime]:
        ...

    async def fetch_readings(
        self, node_name: str, base_station: Optional[str], window: TimeWindow
    ) -> Sequence[Any]:
        ...


@dataclass
class MetricSeries:
    """Chronological metric values sharing one timestamp axis."""

    timestamps: List[datetime] = field(default_factory=list)
    values: Dict[str, List[float]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.timestamps)


@dataclass
class StationReport:
    """Result of the report pipeline for one station."""

    station_id: str
    window: Optional[TimeWindow]
    reading_count: int
    summaries: Dict[str, MetricSummary]
    report: Optional[NarrationReport]
    truncated: bool = False

    @property
    def has_data(self) -> bool:
        return self.report is not None

    def narration(self, fmt: NarrationFormat = NarrationFormat.MARKDOWN) -> str:
        if self.report is None:
            return no_data_narration(self.station_id)
        return render(self.report, fmt)


def no_data_narration(station_id: str) -> str:
    return f"No data available for {station_id} in the selected time period."


def _field(reading: Any, name: str) -> Any:
    if isinstance(reading, Mapping):
        return reading.get(name)
    return getattr(reading, name, None)


def readings_to_series(readings: Sequence[Any]) -> MetricSeries:
    """
    Build metric series from raw readings.

    Readings without a timestamp cannot be placed on the time axis and are
    skipped. Everything else is kept, duplicates included, in time order.
    """
    timed = [r for r in readings if _field(r, "time") is not None]
    skipped = len(readings) - len(timed)
    if skipped:
        logger.warning(f"Skipped {skipped} readings without a timestamp")

    timed.sort(key=lambda r: _field(r, "time"))

    series = MetricSeries(values={key: [] for key in RAW_CHANNELS + ("vswr", "return_loss")})
    for reading in timed:
        series.timestamps.append(_field(reading, "time"))
        for channel in RAW_CHANNELS:
            series.values[channel].append(clean_value(_field(reading, channel)))
        forward = series.values["forward_power"][-1]
        reflected = series.values["reflected_power"][-1]
        series.values["vswr"].append(derive_vswr(forward, reflected))
        series.values["return_loss"].append(derive_return_loss(forward, reflected))

    return series


def series_from_arrays(
    timestamps: Sequence[datetime], data: Mapping[str, Sequence[Any]]
) -> MetricSeries:
    """
    Build metric series from posted metric arrays.

    Arrays that are present must match the timestamp axis in length. VSWR and
    return loss are derived from forward/reflected power unless supplied.

    Raises:
        InvalidInput: On unknown metric names or length mismatches
    """
    unknown = sorted(set(data) - set(ALL_METRICS))
    if unknown:
        raise InvalidInput(f"Unknown metrics: {', '.join(unknown)}")

    for key, values in data.items():
        if len(values) != len(timestamps):
            raise InvalidInput(
                f"Metric '{key}' has {len(values)} values but there are {len(timestamps)} timestamps"
            )

    series = MetricSeries(
        timestamps=list(timestamps),
        values={key: [clean_value(v) for v in values] for key, values in data.items()},
    )

    forward = series.values.get("forward_power")
    reflected = series.values.get("reflected_power")
    if forward is not None and reflected is not None:
        if "vswr" not in series.values:
            series.values["vswr"] = [derive_vswr(f, r) for f, r in zip(forward, reflected)]
        if "return_loss" not in series.values:
            series.values["return_loss"] = [derive_return_loss(f, r) for f, r in zip(forward, reflected)]

    return series


def summarize_series(series: MetricSeries) -> Dict[str, MetricSummary]:
    """
    Summarize every RF metric, plus the network metrics present in the series.

    A metric without any values gets the zero-filled default summary.
    """
    summaries = {}
    for key in REQUIRED_METRICS:
        values = series.values.get(key)
        summaries[key] = summarize(values, series.timestamps) if values else MetricSummary()

    for spec in NETWORK_METRICS:
        values = series.values.get(spec.key)
        if values is not None:
            summaries[spec.key] = summarize(values, series.timestamps) if values else MetricSummary()

    return summaries


def analyze_series(station_id: str, series: MetricSeries) -> StationReport:
    """Summarize a series and generate its narration."""
    if len(series) == 0:
        return StationReport(station_id, None, 0, {}, None)

    summaries = summarize_series(series)
    report = generate_narration(station_id, summaries)
    return StationReport(station_id, None, len(series), summaries, report)


async def compile_station_report(
    source: ReadingSource,
    node_name: str,
    period: str,
    base_station: Optional[str] = None,
    start_date: Optional[DateLike] = None,
    end_date: Optional[DateLike] = None,
) -> StationReport:
    """
    Run the full report pipeline for one station.

    Args:
        source: Reading source (see ReadingSource)
        node_name: Network node (station) name
        period: Period token ("1h", "24h", "7d", "30d", "custom")
        base_station: Optional base station filter
        start_date: Start date for "custom"
        end_date: End date for "custom"

    Returns:
        StationReport; without a report when the window holds no readings

    Raises:
        InvalidPeriod: If the period token is not recognized
        InvalidRange: If a custom range is invalid
    """
    if period not in VALID_PERIODS:
        raise InvalidPeriod(period, VALID_PERIODS)

    station_id = base_station or node_name

    latest = None
    if period != CUSTOM_PERIOD:
        latest = await source.latest_timestamp(node_name)

    window = resolve_window(period, start_date, end_date, latest)
    if window is None:
        logger.info(f"No readings stored for node '{node_name}'")
        return StationReport(station_id, None, 0, {}, None)

    readings = await source.fetch_readings(node_name, base_station, window)
    truncated = bool(getattr(source, "truncated", False))
    logger.info(
        f"Report for '{station_id}' ({period}): {len(readings)} readings "
        f"between {window.start.isoformat()} and {window.end.isoformat()}"
    )
    if truncated:
        logger.warning(
            f"Report for '{station_id}' ({period}) limited to the newest {len(readings)} readings"
        )

    result = analyze_series(station_id, readings_to_series(readings))
    result.window = window
    result.truncated = truncated
    return result
