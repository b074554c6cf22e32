"""
Narration ("auto analysis") generation for station reports.

Turns per-metric summaries into a structured report:
- one section per tracked RF metric (max/min with timestamps, average, trend)
- optional network sections (latency, packet loss, signal strength) with a
  band assessment each
- a system health assessment using fixed thresholds
- an overall assessment listing every triggered problem

Health thresholds (operator heuristics, kept literal):
- VSWR average > 1.5            -> check antenna system
- Return loss average < -20 dB  -> good impedance matching
- Temperature maximum > 50 °C   -> check cooling system
- Voltage average < 200 V       -> check power supply
- Current average > 10 A        -> check for shorts

Network bands:
- Latency (ms):       < 50 excellent, < 100 good, < 200 moderate congestion
- Packet loss (%):    < 1 excellent, < 3 acceptable, < 5 stability issues
- Signal (dBm):       > -50 excellent, > -70 good, > -85 adequate

The generator is deterministic: identical summaries always render to
byte-identical text.
"""

import enum
import html
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional, Tuple

from horizon_api.core.exceptions import InvalidInput
from horizon_api.utils.statistics import MetricSummary


@dataclass(frozen=True)
class MetricSpec:
    """Display metadata for a metric."""

    key: str
    label: str
    unit: str


RF_METRICS: Tuple[MetricSpec, ...] = (
    MetricSpec("forward_power", "Forward Power", "W"),
    MetricSpec("reflected_power", "Reflected Power", "W"),
    MetricSpec("vswr", "VSWR", ""),
    MetricSpec("return_loss", "Return Loss", "dB"),
    MetricSpec("temperature", "Temperature", "°C"),
    MetricSpec("voltage", "Voltage", "V"),
    MetricSpec("current", "Current", "A"),
    MetricSpec("power", "Power", "W"),
)

NETWORK_METRICS: Tuple[MetricSpec, ...] = (
    MetricSpec("latency", "Latency", "ms"),
    MetricSpec("packet_loss", "Packet Loss", "%"),
    MetricSpec("signal_strength", "Signal Strength", "dBm"),
)

REQUIRED_METRICS = tuple(spec.key for spec in RF_METRICS)

ALL_METRICS = tuple(spec.key for spec in RF_METRICS + NETWORK_METRICS)

# Health thresholds
VSWR_WARNING = 1.5
RETURN_LOSS_GOOD = -20.0
TEMPERATURE_WARNING = 50.0
VOLTAGE_LOW = 200.0
CURRENT_HIGH = 10.0

# Overall-assessment thresholds for network metrics
LATENCY_ISSUE = 100.0
PACKET_LOSS_ISSUE = 3.0
SIGNAL_ISSUE = -80.0

OPTIMAL_SENTENCE = (
    "Overall, the base station is performing optimally with all monitored "
    "parameters within normal ranges."
)


class NarrationFormat(str, enum.Enum):
    """Output formats for a rendered narration."""

    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"


@dataclass(frozen=True)
class ReportSection:
    key: str
    heading: str
    lines: Tuple[str, ...]


@dataclass(frozen=True)
class HealthCheck:
    key: str
    ok: bool
    message: str
    issue: Optional[str] = None


@dataclass(frozen=True)
class NarrationReport:
    """Generated analysis for one station and one window."""

    station_id: str
    title: str
    sections: Tuple[ReportSection, ...]
    health_checks: Tuple[HealthCheck, ...]
    issues: Tuple[str, ...]
    overall: str

    def section(self, key: str) -> Optional[ReportSection]:
        for section in self.sections:
            if section.key == key:
                return section
        return None


# ============================================================================
# FORMATTING
# ============================================================================

def format_value(value: float, unit: str) -> str:
    """Format a metric value to two decimals with its unit, e.g. ``12.50W``."""
    return f"{value:.2f}{unit}"


def format_timestamp(moment: Any) -> str:
    if moment is None:
        return "n/a"
    if isinstance(moment, datetime):
        return moment.strftime("%Y-%m-%d %H:%M:%S")
    return str(moment)


def _summary_lines(spec: MetricSpec, summary: MetricSummary) -> List[str]:
    return [
        f"Maximum: {format_value(summary.max, spec.unit)} at {format_timestamp(summary.max_timestamp)}",
        f"Minimum: {format_value(summary.min, spec.unit)} at {format_timestamp(summary.min_timestamp)}",
        f"Average: {format_value(summary.average, spec.unit)}",
        f"Trend: {summary.trend_description}",
    ]


# ============================================================================
# ASSESSMENT BANDS
# ============================================================================

def assess_responsiveness(average_latency: float) -> str:
    """Band assessment for latency-like metrics (lower is better)."""
    if average_latency < 50:
        return "Latency is excellent, indicating responsive network performance."
    elif average_latency < 100:
        return "Latency is good, showing reliable network performance."
    elif average_latency < 200:
        return "Latency suggests moderate congestion on the network."
    else:
        return "Latency indicates significant delays that may need attention."


def assess_reliability(average_loss: float) -> str:
    """Band assessment for packet-loss-like metrics (lower is better)."""
    if average_loss < 1:
        return "The network shows excellent reliability with minimal packet loss."
    elif average_loss < 3:
        return "Network reliability is within acceptable ranges."
    elif average_loss < 5:
        return "Packet loss rates indicate some network stability issues."
    else:
        return "High packet loss rates suggest significant problems requiring investigation."


def assess_signal_strength(average_signal: float) -> str:
    """Band assessment for dBm signal strength (more negative is weaker)."""
    if average_signal > -50:
        return "Signal strength is excellent, providing optimal coverage."
    elif average_signal > -70:
        return "Signal strength is good for reliable operations."
    elif average_signal > -85:
        return "Signal strength is adequate but could be improved."
    else:
        return "Signal strength is weak and may cause connectivity issues."


NETWORK_ASSESSMENTS = {
    "latency": assess_responsiveness,
    "packet_loss": assess_reliability,
    "signal_strength": assess_signal_strength,
}


def rf_health_checks(summaries: Mapping[str, MetricSummary]) -> List[HealthCheck]:
    """Evaluate the RF health rules against the metric summaries."""
    vswr = summaries["vswr"]
    return_loss = summaries["return_loss"]
    temperature = summaries["temperature"]
    voltage = summaries["voltage"]
    current = summaries["current"]

    checks = []

    if vswr.average > VSWR_WARNING:
        checks.append(HealthCheck("vswr", False, "High VSWR detected. Check antenna system.", "high VSWR"))
    else:
        checks.append(HealthCheck("vswr", True, "VSWR within acceptable range."))

    if return_loss.average < RETURN_LOSS_GOOD:
        checks.append(HealthCheck("return_loss", True, "Good impedance matching."))
    else:
        checks.append(HealthCheck(
            "return_loss", False, "Poor return loss. Check RF system.", "poor return loss"
        ))

    if temperature.max > TEMPERATURE_WARNING:
        checks.append(HealthCheck(
            "temperature", False, "High temperature detected. Check cooling system.", "high temperature"
        ))
    else:
        checks.append(HealthCheck("temperature", True, "Temperature within normal range."))

    if voltage.average < VOLTAGE_LOW:
        checks.append(HealthCheck(
            "voltage", False, "Low voltage detected. Check power supply.", "low voltage"
        ))
    else:
        checks.append(HealthCheck("voltage", True, "Voltage within normal range."))

    if current.average > CURRENT_HIGH:
        checks.append(HealthCheck(
            "current", False, "High current detected. Check for shorts.", "high current"
        ))
    else:
        checks.append(HealthCheck("current", True, "Current within normal range."))

    return checks


def network_issues(summaries: Mapping[str, MetricSummary]) -> List[str]:
    """Problems raised by the optional network metrics, if present."""
    issues = []
    latency = summaries.get("latency")
    packet_loss = summaries.get("packet_loss")
    signal = summaries.get("signal_strength")

    if latency is not None and latency.average > LATENCY_ISSUE:
        issues.append("high latency")
    if packet_loss is not None and packet_loss.average > PACKET_LOSS_ISSUE:
        issues.append("significant packet loss")
    if signal is not None and signal.average < SIGNAL_ISSUE:
        issues.append("weak signal strength")
    return issues


def overall_assessment(issues: List[str]) -> str:
    """Single sentence listing every triggered problem."""
    if not issues:
        return OPTIMAL_SENTENCE
    return (
        f"The base station requires attention due to {', '.join(issues)}. "
        "Consider investigating these issues to improve performance."
    )


# ============================================================================
# GENERATION
# ============================================================================

def generate_narration(station_id: str, summaries: Mapping[str, MetricSummary]) -> NarrationReport:
    """
    Build the analysis report for one station.

    Args:
        station_id: Station (node or base station) name shown in the title
        summaries: Metric key -> MetricSummary. All RF metrics are required;
            network metrics are optional.

    Returns:
        NarrationReport

    Raises:
        InvalidInput: If summaries is not a mapping or an RF metric is absent
    """
    if summaries is None or not isinstance(summaries, Mapping):
        raise InvalidInput("Metric summaries are required to generate a narration")

    missing = [key for key in REQUIRED_METRICS if key not in summaries]
    if missing:
        raise InvalidInput(f"Missing metric summaries: {', '.join(missing)}")

    for key, summary in summaries.items():
        if not isinstance(summary, MetricSummary):
            raise InvalidInput(f"Summary for {key!r} is not a MetricSummary")

    sections = [
        ReportSection(spec.key, spec.label, tuple(_summary_lines(spec, summaries[spec.key])))
        for spec in RF_METRICS
    ]

    for spec in NETWORK_METRICS:
        summary = summaries.get(spec.key)
        if summary is None:
            continue
        lines = _summary_lines(spec, summary)
        lines.append(f"Assessment: {NETWORK_ASSESSMENTS[spec.key](summary.average)}")
        sections.append(ReportSection(spec.key, spec.label, tuple(lines)))

    checks = rf_health_checks(summaries)
    issues = [check.issue for check in checks if check.issue] + network_issues(summaries)

    return NarrationReport(
        station_id=station_id,
        title=f"RF System Analysis for {station_id}",
        sections=tuple(sections),
        health_checks=tuple(checks),
        issues=tuple(issues),
        overall=overall_assessment(issues),
    )


# ============================================================================
# RENDERING
# ============================================================================

def _check_marker(check: HealthCheck) -> str:
    return "✅" if check.ok else "⚠️"


def render_markdown(report: NarrationReport) -> str:
    out = [f"## {report.title}", ""]
    for section in report.sections:
        out.append(f"### {section.heading}")
        out.extend(f"- {line}" for line in section.lines)
        out.append("")
    out.append("### System Health Assessment")
    out.extend(f"- {_check_marker(check)} {check.message}" for check in report.health_checks)
    out.append("")
    out.append("### Overall Assessment")
    out.append(report.overall)
    return "\n".join(out) + "\n"


def render_html(report: NarrationReport) -> str:
    esc = html.escape
    out = [f"<h3>{esc(report.title)}</h3>"]
    for section in report.sections:
        out.append(f"<h4>{esc(section.heading)}</h4>")
        out.append("<ul>")
        out.extend(f"<li>{esc(line)}</li>" for line in section.lines)
        out.append("</ul>")
    out.append("<h4>System Health Assessment</h4>")
    out.append("<ul>")
    out.extend(
        f"<li>{_check_marker(check)} {esc(check.message)}</li>" for check in report.health_checks
    )
    out.append("</ul>")
    out.append("<h4>Overall Assessment</h4>")
    out.append(f"<p>{esc(report.overall)}</p>")
    return "\n".join(out) + "\n"


def render_text(report: NarrationReport) -> str:
    out = [report.title, "=" * len(report.title), ""]
    for section in report.sections:
        out.append(section.heading)
        out.extend(f"  {line}" for line in section.lines)
        out.append("")
    out.append("System Health Assessment")
    for check in report.health_checks:
        out.append(f"  [{'OK' if check.ok else 'WARN'}] {check.message}")
    out.append("")
    out.append("Overall Assessment")
    out.append(f"  {report.overall}")
    return "\n".join(out) + "\n"


RENDERERS = {
    NarrationFormat.MARKDOWN: render_markdown,
    NarrationFormat.HTML: render_html,
    NarrationFormat.TEXT: render_text,
}


def render(report: NarrationReport, fmt: NarrationFormat = NarrationFormat.MARKDOWN) -> str:
    """Render a report in the requested format."""
    return RENDERERS[NarrationFormat(fmt)](report)
