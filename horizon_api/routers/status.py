"""
Status router.

This module contains the health check endpoint.
"""

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

router = APIRouter(
    tags=["status"],
)

limiter = Limiter(key_func=get_remote_address)


@router.get("/health", response_model=dict)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """
    Health check endpoint.

    Rate limit: 60 requests per minute
    """
    return {"status": "ok"}
