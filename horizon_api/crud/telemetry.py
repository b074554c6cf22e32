"""
Telemetry CRUD operations.

This module contains the queries behind the data, base-station, date-range
and analysis endpoints, plus the session-backed reading source used by the
report pipeline.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import and_, asc, desc, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from horizon_api.crud.base import CRUDBase
from horizon_api.models.node_status import NodeStatus
from horizon_api.schemas.telemetry import ReadingCreate
from horizon_api.utils.time_window import TimeWindow


class CRUDNodeStatus(CRUDBase[NodeStatus, ReadingCreate]):
    """
    CRUD operations for NodeStatus readings.
    """

    async def get_latest_timestamp(
        self, db: AsyncSession, *, node_name: str
    ) -> Optional[datetime]:
        """
        Get the time of the most recent reading for a node.

        Args:
            db: Database session
            node_name: Network node name

        Returns:
            Latest reading time or None if the node has no readings
        """
        result = await db.execute(
            select(func.max(NodeStatus.time)).where(NodeStatus.node_name == node_name)
        )
        return result.scalar()

    async def get_readings_in_window(
        self,
        db: AsyncSession,
        *,
        node_name: str,
        window: TimeWindow,
        base_station: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        newest_first: bool = True
    ) -> List[NodeStatus]:
        """
        Get a node's readings inside a time window (bounds inclusive).

        Args:
            db: Database session
            node_name: Network node name
            window: Resolved time window
            base_station: Only readings for this base station
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)
            newest_first: Order by time descending (ascending otherwise)

        Returns:
            List of NodeStatus instances
        """
        conditions = [
            NodeStatus.node_name == node_name,
            NodeStatus.time >= window.start,
            NodeStatus.time <= window.end,
        ]
        if base_station:
            conditions.append(NodeStatus.base_station_name == base_station)

        order = desc(NodeStatus.time) if newest_first else asc(NodeStatus.time)
        query = (
            select(NodeStatus)
            .where(and_(*conditions))
            .order_by(order, NodeStatus.id)
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def get_base_stations(self, db: AsyncSession, *, node_name: str) -> List[str]:
        """
        Get the distinct base stations reported by a node, sorted by name.

        Readings without a base station are ignored.
        """
        result = await db.execute(
            select(NodeStatus.base_station_name)
            .where(
                and_(
                    NodeStatus.node_name == node_name,
                    NodeStatus.base_station_name.isnot(None),
                    NodeStatus.base_station_name != "",
                )
            )
            .distinct()
            .order_by(NodeStatus.base_station_name)
        )
        return list(result.scalars().all())

    async def get_node_names(
        self, db: AsyncSession, *, tracked_nodes: Sequence[str] = ()
    ) -> List[str]:
        """
        Get the distinct node names, sorted.

        Args:
            db: Database session
            tracked_nodes: When non-empty, only these nodes are returned

        Returns:
            List of node names
        """
        query = select(NodeStatus.node_name).distinct().order_by(NodeStatus.node_name)
        if tracked_nodes:
            query = query.where(NodeStatus.node_name.in_(list(tracked_nodes)))
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_date_range(
        self,
        db: AsyncSession,
        *,
        node_name: Optional[str] = None,
        tracked_nodes: Sequence[str] = ()
    ) -> tuple:
        """
        Get the first and last reading time.

        Args:
            db: Database session
            node_name: Restrict to one node
            tracked_nodes: When non-empty (and no node given), restrict to these nodes

        Returns:
            Tuple of (min_time, max_time); both None without readings
        """
        query = select(func.min(NodeStatus.time), func.max(NodeStatus.time))
        if node_name:
            query = query.where(NodeStatus.node_name == node_name)
        elif tracked_nodes:
            query = query.where(NodeStatus.node_name.in_(list(tracked_nodes)))

        result = await db.execute(query)
        min_time, max_time = result.one()
        return min_time, max_time


class SessionReadingSource:
    """
    Reading source backed by an AsyncSession.

    Adapts the CRUD queries to the interface the report pipeline expects.
    With a limit, the newest ``limit`` readings of the window are kept and
    ``truncated`` records whether older readings were left out.
    """

    def __init__(self, db: AsyncSession, limit: Optional[int] = None):
        self.db = db
        self.limit = limit
        self.truncated = False

    async def latest_timestamp(self, node_name: str) -> Optional[datetime]:
        return await node_status.get_latest_timestamp(self.db, node_name=node_name)

    async def fetch_readings(
        self, node_name: str, base_station: Optional[str], window: TimeWindow
    ) -> List[NodeStatus]:
        """Get the window's readings in time order, newest kept under the cap."""
        # One extra row tells a full window from a truncated one
        rows = await node_status.get_readings_in_window(
            self.db,
            node_name=node_name,
            window=window,
            base_station=base_station,
            limit=self.limit + 1 if self.limit is not None else None,
            newest_first=True,
        )
        rows = list(rows)
        self.truncated = self.limit is not None and len(rows) > self.limit
        if self.truncated:
            rows = rows[:self.limit]
        rows.reverse()
        return rows


# Create CRUD instance
node_status = CRUDNodeStatus(NodeStatus)
