"""
Telemetry router.

This module contains endpoints for browsing stored readings: node and
base-station listings, the available date range, readings inside a period,
and reading ingestion.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address

from horizon_api.config import settings
from horizon_api.core.exceptions import InvalidPeriod, TelemetryError
from horizon_api.crud.telemetry import node_status as node_status_crud
from horizon_api.database import get_db
from horizon_api.dependencies.telemetry import to_http_exception
from horizon_api.models.node_status import NodeStatus
from horizon_api.schemas.telemetry import DateRangeResponse, ReadingCreate, ReadingResponse
from horizon_api.utils.logging_config import get_logger
from horizon_api.utils.time_window import CUSTOM_PERIOD, VALID_PERIODS, resolve_window

logger = get_logger(__name__)

router = APIRouter(
    tags=["Telemetry"],
    responses={
        400: {"description": "Invalid period or date range"},
    },
)

limiter = Limiter(key_func=get_remote_address)


@router.get("/nodes", response_model=List[str])
@limiter.limit("100/minute")
async def list_nodes(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    List the network nodes that have readings.

    Restricted to TRACKED_NODES when that setting is non-empty.

    Rate limit: 100 requests per minute
    """
    return await node_status_crud.get_node_names(db, tracked_nodes=settings.TRACKED_NODES)


@router.get("/date-range", response_model=DateRangeResponse)
@limiter.limit("100/minute")
async def get_date_range(
    request: Request,
    node_name: Optional[str] = Query(None, alias="nodeName", description="Restrict to one node"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the first and last reading time.

    Without a node, the range covers all tracked nodes.

    Rate limit: 100 requests per minute
    """
    min_date, max_date = await node_status_crud.get_date_range(
        db, node_name=node_name, tracked_nodes=settings.TRACKED_NODES
    )
    return DateRangeResponse(node_name=node_name, min_date=min_date, max_date=max_date)


@router.get("/base-stations/{node_name}", response_model=List[str])
@limiter.limit("100/minute")
async def list_base_stations(
    request: Request,
    node_name: str,
    db: AsyncSession = Depends(get_db),
):
    """
    List the distinct base stations of a node, sorted by name.

    Rate limit: 100 requests per minute
    """
    return await node_status_crud.get_base_stations(db, node_name=node_name)


async def _readings_for_period(
    db: AsyncSession,
    node_name: str,
    period: str,
    base_station: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
    skip: int,
    limit: int,
) -> List[NodeStatus]:
    """Resolve the period and return the matching readings, newest first."""
    try:
        if period not in VALID_PERIODS:
            raise InvalidPeriod(period, VALID_PERIODS)
        latest = None
        if period != CUSTOM_PERIOD:
            latest = await node_status_crud.get_latest_timestamp(db, node_name=node_name)
        window = resolve_window(period, start_date, end_date, latest)
    except TelemetryError as exc:
        raise to_http_exception(exc)

    if window is None:
        logger.info(f"No readings stored for node '{node_name}'")
        return []

    readings = await node_status_crud.get_readings_in_window(
        db,
        node_name=node_name,
        window=window,
        base_station=base_station,
        skip=skip,
        limit=limit,
    )
    logger.info(
        f"Fetched {len(readings)} readings for '{node_name}' "
        f"(station={base_station or 'all'}, period={period})"
    )
    return readings


@router.get("/data/{node_name}", response_model=List[ReadingResponse])
@limiter.limit("100/minute")
async def get_readings_default_period(
    request: Request,
    node_name: str,
    base_station: Optional[str] = Query(None, alias="baseStation"),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.MAX_READINGS_PER_REQUEST, ge=1, le=settings.MAX_READINGS_PER_REQUEST),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a node's readings for the default period (DEFAULT_PERIOD).

    Rate limit: 100 requests per minute
    """
    return await _readings_for_period(
        db, node_name, settings.DEFAULT_PERIOD, base_station, None, None, skip, limit
    )


@router.get("/data/{node_name}/{period}", response_model=List[ReadingResponse])
@limiter.limit("100/minute")
async def get_readings(
    request: Request,
    node_name: str,
    period: str,
    base_station: Optional[str] = Query(None, alias="baseStation", description="Filter by base station"),
    start_date: Optional[str] = Query(None, alias="startDate", description="Start date for the custom period"),
    end_date: Optional[str] = Query(None, alias="endDate", description="End date for the custom period (inclusive)"),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.MAX_READINGS_PER_REQUEST, ge=1, le=settings.MAX_READINGS_PER_REQUEST),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a node's readings for a period, newest first.

    Periods: 1h, 24h, 7d, 30d (ending at the node's latest reading) or
    custom (startDate/endDate). Each reading carries derived VSWR and
    return loss.

    Rate limit: 100 requests per minute
    """
    return await _readings_for_period(
        db, node_name, period, base_station, start_date, end_date, skip, limit
    )


@router.get("/data/{node_name}/{base_station}/{period}", response_model=List[ReadingResponse])
@limiter.limit("100/minute")
async def get_station_readings(
    request: Request,
    node_name: str,
    base_station: str,
    period: str,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.MAX_READINGS_PER_REQUEST, ge=1, le=settings.MAX_READINGS_PER_REQUEST),
    db: AsyncSession = Depends(get_db),
):
    """
    Get one base station's readings for a period, newest first.

    Rate limit: 100 requests per minute
    """
    return await _readings_for_period(
        db, node_name, period, base_station, start_date, end_date, skip, limit
    )


@router.post("/data", response_model=ReadingResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_reading(
    request: Request,
    reading: ReadingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Store one telemetry reading.

    Rate limit: 30 requests per minute
    """
    db_reading = await node_status_crud.create(db, obj_in=reading)
    logger.info(f"Stored reading {db_reading.id} for '{reading.node_name}' at {reading.time.isoformat()}")
    return db_reading
