# Pydantic schemas package

from horizon_api.schemas.base import BaseSchema, IDSchema
from horizon_api.schemas.telemetry import (
    ReadingBase, ReadingCreate, ReadingResponse,
    DateRangeResponse, TimeWindowResponse,
    MetricSummaryResponse, AnalyzeRequest, AnalysisResponse,
)

__all__ = [
    # Base schemas
    "BaseSchema", "IDSchema",

    # Telemetry schemas
    "ReadingBase", "ReadingCreate", "ReadingResponse",
    "DateRangeResponse", "TimeWindowResponse",
    "MetricSummaryResponse", "AnalyzeRequest", "AnalysisResponse",
]
