# API routers package

from horizon_api.routers.analysis import router as analysis_router
from horizon_api.routers.status import router as status_router
from horizon_api.routers.telemetry import router as telemetry_router

__all__ = ["analysis_router", "status_router", "telemetry_router"]
