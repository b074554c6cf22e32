"""
Telemetry schemas.

This module contains Pydantic schemas for reading ingestion, reading
responses and analysis requests/responses.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from horizon_api.schemas.base import BaseSchema, IDSchema
from horizon_api.utils.narration import ALL_METRICS, NarrationFormat
from horizon_api.utils.rf import derive_return_loss, derive_vswr
from horizon_api.utils.statistics import Trend

logger = logging.getLogger(__name__)


class ReadingBase(BaseSchema):
    """
    Base telemetry reading schema.

    Channel values are optional; missing values count as 0 in analysis.
    """
    node_name: str = Field(..., min_length=1, max_length=100, description="Network node name")
    base_station_name: Optional[str] = Field(None, max_length=100, description="Base station name")
    time: datetime = Field(..., description="Sample time")
    status_comments: Optional[str] = Field(None, max_length=500)

    forward_power: Optional[float] = Field(None, description="Forward power in W")
    reflected_power: Optional[float] = Field(None, description="Reflected power in W")
    temperature: Optional[float] = Field(None, description="Equipment temperature in °C")
    voltage: Optional[float] = Field(None, description="Supply voltage in V")
    current: Optional[float] = Field(None, description="Supply current in A")
    power: Optional[float] = Field(None, description="Consumed power in W")

    digital1_value: Optional[bool] = None
    digital1_alarm: Optional[bool] = None
    digital2_value: Optional[bool] = None
    digital2_alarm: Optional[bool] = None


class ReadingCreate(ReadingBase):
    """Schema for inserting a reading."""

    @field_validator('forward_power', 'reflected_power')
    @classmethod
    def warn_negative_power(cls, v, info):
        """Negative power is stored as reported but never used in derivation."""
        if v is not None and v < 0:
            logger.warning(
                f'{info.field_name} {v} W is negative. '
                'It will be treated as no signal when deriving VSWR and return loss.'
            )
        return v


class ReadingResponse(ReadingBase, IDSchema):
    """
    Reading as returned by the API, with derived RF metrics.
    """
    vswr: Optional[float] = None
    return_loss: Optional[float] = None

    @model_validator(mode='after')
    def derive_rf_metrics(self):
        """Fill in VSWR and return loss from forward/reflected power."""
        self.vswr = derive_vswr(self.forward_power, self.reflected_power)
        self.return_loss = derive_return_loss(self.forward_power, self.reflected_power)
        return self


class DateRangeResponse(BaseSchema):
    """First and last reading time."""
    node_name: Optional[str] = None
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None


class TimeWindowResponse(BaseSchema):
    """Resolved query window."""
    start: datetime
    end: datetime
    period: str


class MetricSummaryResponse(BaseSchema):
    """Statistics for one metric."""
    min: float
    max: float
    average: float
    standard_deviation: float
    trend: Trend
    percent_change: Optional[float] = None
    max_timestamp: Optional[datetime] = None
    min_timestamp: Optional[datetime] = None
    count: int
    trend_label: str
    trend_description: str


class AnalyzeRequest(BaseSchema):
    """
    Narration request built from metric arrays.

    Every array in ``data`` is aligned with ``timestamps``. Accepted metric
    names: forward_power, reflected_power, vswr, return_loss, temperature,
    voltage, current, power, latency, packet_loss, signal_strength.
    """
    station_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("station_id", "stationId", "baseStation"),
        description="Station the data belongs to",
    )
    timestamps: List[datetime] = Field(default_factory=list)
    data: Dict[str, List[Optional[float]]] = Field(default_factory=dict)
    format: NarrationFormat = NarrationFormat.MARKDOWN

    @model_validator(mode='after')
    def validate_arrays(self):
        """Reject unknown metrics and arrays not aligned with the timestamps."""
        unknown = sorted(set(self.data) - set(ALL_METRICS))
        if unknown:
            raise ValueError(
                f"Unknown metrics: {', '.join(unknown)}. "
                f"Accepted metrics: {', '.join(ALL_METRICS)}"
            )
        for key, values in self.data.items():
            if len(values) != len(self.timestamps):
                raise ValueError(
                    f"Metric '{key}' has {len(values)} values "
                    f"but there are {len(self.timestamps)} timestamps"
                )
        return self


class AnalysisResponse(BaseSchema):
    """Narration plus the statistics it was generated from."""
    station_id: str
    format: NarrationFormat
    narration: str
    window: Optional[TimeWindowResponse] = None
    reading_count: int = 0
    truncated: bool = False
    summaries: Dict[str, MetricSummaryResponse] = Field(default_factory=dict)
