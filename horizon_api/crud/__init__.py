# CRUD operations package

from horizon_api.crud.base import CRUDBase
from horizon_api.crud.telemetry import CRUDNodeStatus, SessionReadingSource, node_status

__all__ = [
    "CRUDBase",
    "CRUDNodeStatus", "SessionReadingSource", "node_status",
]
