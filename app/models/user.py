"""User accounts: customers, admins and delivery agents"""
import calendar
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from app.models.base import Base

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"
ROLE_AGENT = "agent"
ROLES = (ROLE_CUSTOMER, ROLE_ADMIN, ROLE_AGENT)

STATUS_ACTIVE = "Active"
STATUS_INACTIVE = "Inactive"
STATUS_IDLE = "Idle"
USER_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_IDLE)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    # bcrypt hash, never serialized
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_CUSTOMER, index=True)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE, index=True)
    phone = Column(String, nullable=False, default="")
    location = Column(String, nullable=False, default="", index=True)
    profile_picture = Column(String, nullable=False, default="")
    # Tokens issued before this instant are rejected
    password_changed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shipments = relationship(
        "Shipment", back_populates="customer", foreign_keys="Shipment.customer_id"
    )
    assigned_shipments = relationship(
        "Shipment", back_populates="agent", foreign_keys="Shipment.agent_id"
    )

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def changed_password_after(self, issued_at: int) -> bool:
        """True if the password changed after a token issued at ``issued_at`` (epoch seconds)."""
        if not self.password_changed_at:
            return False
        return calendar.timegm(self.password_changed_at.utctimetuple()) > issued_at
