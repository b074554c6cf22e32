"""
Node status database model.

One row per telemetry sample reported by a transmitter site (network node).
A node may front several base stations; readings are tagged with the base
station they belong to when the site reports one.

Legacy column mapping (SCADA export):
- Analog1Value -> voltage
- Analog2Value -> current
- Analog3Value -> power
- Digital1/2 Value/Alarm -> digital*_value / digital*_alarm
- StatusCommentsStr -> status_comments
"""

from sqlalchemy import Boolean, Column, DateTime, Float, Index, String

from horizon_api.models.base import BaseModel


class NodeStatus(BaseModel):
    """
    A single telemetry reading.

    Readings are neither guaranteed unique nor ordered; analysis sorts them
    by time before summarizing.
    """

    __tablename__ = "node_status"

    node_name = Column(
        String(100),
        nullable=False,
        index=True,
        comment="Network node (site) that reported the reading"
    )
    base_station_name = Column(
        String(100),
        nullable=True,
        index=True,
        comment="Base station the reading belongs to, when reported"
    )
    time = Column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="Time the sample was taken"
    )
    status_comments = Column(
        String(500),
        nullable=True,
        comment="Free-text status reported by the site"
    )

    # RF and power channels
    forward_power = Column(Float, nullable=True, comment="Forward power in W")
    reflected_power = Column(Float, nullable=True, comment="Reflected power in W")
    temperature = Column(Float, nullable=True, comment="Equipment temperature in °C")
    voltage = Column(Float, nullable=True, comment="Supply voltage in V (Analog1)")
    current = Column(Float, nullable=True, comment="Supply current in A (Analog2)")
    power = Column(Float, nullable=True, comment="Consumed power in W (Analog3)")

    # Digital inputs
    digital1_value = Column(Boolean, nullable=True)
    digital1_alarm = Column(Boolean, nullable=True)
    digital2_value = Column(Boolean, nullable=True)
    digital2_alarm = Column(Boolean, nullable=True)

    __table_args__ = (
        Index("idx_node_status_node_station_time", "node_name", "base_station_name", "time"),
    )

    def __repr__(self) -> str:
        return f"<NodeStatus(node={self.node_name}, station={self.base_station_name}, time={self.time})>"
