"""
Domain exceptions for telemetry analysis.

Routers translate these into HTTP errors; the computation modules never
perform user-facing I/O themselves.
"""


class TelemetryError(ValueError):
    """Base class for structurally invalid analysis requests."""


class InvalidPeriod(TelemetryError):
    """Raised when a time-period token is not recognized."""

    def __init__(self, period, allowed=None):
        self.period = period
        self.allowed = tuple(allowed or ())
        message = f"Invalid time period: {period!r}"
        if self.allowed:
            message += f". Must be one of: {', '.join(self.allowed)}"
        super().__init__(message)


class InvalidRange(TelemetryError):
    """Raised when a custom range is missing, unparseable, or ends before it starts."""


class InvalidInput(TelemetryError):
    """Raised when data passed to summarization or narration is malformed."""
