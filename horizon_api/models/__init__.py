# Database models package

from horizon_api.models.base import BaseModel
from horizon_api.models.node_status import NodeStatus

__all__ = [
    "BaseModel",
    "NodeStatus",
]
