"""
Telemetry dependencies.

This module contains dependency injection functions shared by the telemetry
and analysis routers, and the translation of domain errors into HTTP errors.
"""

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from horizon_api.config import settings
from horizon_api.core.exceptions import InvalidInput, TelemetryError
from horizon_api.crud.telemetry import SessionReadingSource
from horizon_api.database import get_db
from horizon_api.utils.logging_config import get_logger

logger = get_logger(__name__)


async def get_reading_source(db: AsyncSession = Depends(get_db)) -> SessionReadingSource:
    """
    Reading source for the report pipeline, bound to the request's session.

    Reads are capped at the newest MAX_READINGS_PER_REQUEST rows per report.
    """
    return SessionReadingSource(db, limit=settings.MAX_READINGS_PER_REQUEST)


def to_http_exception(exc: TelemetryError) -> HTTPException:
    """
    Map a domain error to an HTTP error.

    Malformed analysis input is a validation error (422); bad periods and
    ranges are bad requests (400).
    """
    if isinstance(exc, InvalidInput):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_400_BAD_REQUEST
    logger.warning(f"Rejected request: {exc}")
    return HTTPException(status_code=code, detail=str(exc))
