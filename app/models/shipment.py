"""
Shipment Models

A consignment moving from an origin to a destination, owned by one customer
and optionally assigned to one delivery agent.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Float, Text, JSON, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.utils.helpers import generate_public_id, isoformat

SHIPMENT_PENDING = "Pending"
SHIPMENT_IN_TRANSIT = "In Transit"
SHIPMENT_DELIVERED = "Delivered"
SHIPMENT_DELAYED = "Delayed"
SHIPMENT_CANCELLED = "Cancelled"
SHIPMENT_STATUSES = (
    SHIPMENT_PENDING,
    SHIPMENT_IN_TRANSIT,
    SHIPMENT_DELIVERED,
    SHIPMENT_DELAYED,
    SHIPMENT_CANCELLED,
)

MINIMUM_COST = 20.0
COST_PER_KG = 5.0


def shipment_cost(weight) -> float:
    """Price of a shipment: 5 per kg with a floor of 20."""
    return max(MINIMUM_COST, float(weight or 0) * COST_PER_KG)


def new_shipment_id() -> str:
    return generate_public_id("SHP")


class Shipment(Base):
    """
    Shipment record.

    ``shipment_id`` is assigned once at insert and never touched by updates.
    ``tracking_history`` is an append-only list of
    ``{"status", "location", "timestamp"}`` entries, oldest first.
    """
    __tablename__ = "shipments"
    __table_args__ = (
        CheckConstraint("cost >= 0", name="ck_shipments_cost_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shipment_id = Column(String(20), unique=True, index=True, nullable=False, default=new_shipment_id)

    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    origin = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    status = Column(String(20), nullable=False, default=SHIPMENT_PENDING, index=True)
    dispatch_date = Column(DateTime, default=datetime.utcnow, index=True)
    weight = Column(Float, nullable=True)
    package_details = Column(Text, nullable=True)
    cost = Column(Float, nullable=False, default=0)

    tracking_history = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("User", back_populates="shipments", foreign_keys=[customer_id])
    agent = relationship("User", back_populates="assigned_shipments", foreign_keys=[agent_id])
    payments = relationship("Payment", back_populates="shipment")

    def add_tracking_entry(self, status: str, location: str, timestamp: datetime | None = None):
        # Reassign so SQLAlchemy sees the JSON column change
        entry = {
            "status": status,
            "location": location,
            "timestamp": isoformat(timestamp or datetime.utcnow()),
        }
        self.tracking_history = list(self.tracking_history or []) + [entry]

    def __repr__(self):
        return f"<Shipment {self.shipment_id} {self.status}>"
