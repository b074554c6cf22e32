"""
Analysis router.

This module contains the narration ("auto analysis") endpoints:
- POST /analyze: narration from metric arrays supplied by the client
- GET /analysis/{node_name}/{period}: end-to-end report from stored readings
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from horizon_api.core.exceptions import TelemetryError
from horizon_api.crud.telemetry import SessionReadingSource
from horizon_api.dependencies.telemetry import get_reading_source, to_http_exception
from horizon_api.schemas.telemetry import (
    AnalysisResponse,
    AnalyzeRequest,
    MetricSummaryResponse,
    TimeWindowResponse,
)
from horizon_api.utils.logging_config import get_logger
from horizon_api.utils.narration import NarrationFormat
from horizon_api.utils.reporting import (
    StationReport,
    analyze_series,
    compile_station_report,
    series_from_arrays,
)

logger = get_logger(__name__)

router = APIRouter(
    tags=["Analysis"],
    responses={
        400: {"description": "Invalid period or date range"},
        422: {"description": "Malformed analysis input"},
    },
)

limiter = Limiter(key_func=get_remote_address)


def _analysis_response(result: StationReport, fmt: NarrationFormat) -> AnalysisResponse:
    return AnalysisResponse(
        station_id=result.station_id,
        format=fmt,
        narration=result.narration(fmt),
        window=TimeWindowResponse.model_validate(result.window) if result.window else None,
        reading_count=result.reading_count,
        truncated=result.truncated,
        summaries={
            key: MetricSummaryResponse.model_validate(summary)
            for key, summary in result.summaries.items()
        },
    )


@router.post("/analyze", response_model=AnalysisResponse)
@limiter.limit("30/minute")
async def analyze(
    request: Request,
    payload: AnalyzeRequest,
):
    """
    Generate a narration from metric arrays.

    ``data`` maps metric names to arrays aligned with ``timestamps``. VSWR
    and return loss are derived from forward/reflected power when not
    supplied. Metrics that are not supplied are reported with zeroed
    statistics.

    Rate limit: 30 requests per minute
    """
    try:
        series = series_from_arrays(payload.timestamps, payload.data)
        result = analyze_series(payload.station_id, series)
    except TelemetryError as exc:
        raise to_http_exception(exc)

    logger.info(f"Analyzed {result.reading_count} posted samples for '{payload.station_id}'")
    return _analysis_response(result, payload.format)


@router.get("/analysis/{node_name}/{period}", response_model=AnalysisResponse)
@limiter.limit("30/minute")
async def get_analysis(
    request: Request,
    node_name: str,
    period: str,
    base_station: Optional[str] = Query(None, alias="baseStation", description="Analyze one base station"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Start date for the custom period"),
    end_date: Optional[str] = Query(None, alias="endDate", description="End date for the custom period (inclusive)"),
    format: NarrationFormat = Query(NarrationFormat.MARKDOWN, description="Narration format"),
    source: SessionReadingSource = Depends(get_reading_source),
):
    """
    Generate the narration for a node (or one of its base stations) over a period.

    Returns a "No data available" narration when the period holds no readings.

    Rate limit: 30 requests per minute
    """
    try:
        result = await compile_station_report(
            source,
            node_name,
            period,
            base_station=base_station,
            start_date=start_date,
            end_date=end_date,
        )
    except TelemetryError as exc:
        raise to_http_exception(exc)

    return _analysis_response(result, format)
