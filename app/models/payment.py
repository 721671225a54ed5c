"""Payments recorded against shipments"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.utils.helpers import generate_public_id

PAYMENT_COMPLETED = "Completed"
PAYMENT_PENDING = "Pending"
PAYMENT_FAILED = "Failed"
PAYMENT_REFUNDED = "Refunded"
PAYMENT_STATUSES = (PAYMENT_COMPLETED, PAYMENT_PENDING, PAYMENT_FAILED, PAYMENT_REFUNDED)

PAYMENT_METHODS = ("M-Pesa", "Cash", "Card")


def new_payment_id() -> str:
    return generate_public_id("PAY-")


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(String(20), unique=True, index=True, nullable=False, default=new_payment_id)

    shipment_id = Column(Integer, ForeignKey("shipments.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    amount = Column(Float, nullable=False)
    method = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=PAYMENT_PENDING, index=True)
    transaction_date = Column(DateTime, default=datetime.utcnow, index=True)
    # Set when a pending payment is settled
    transaction_ref = Column(String(40), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="payments")
    customer = relationship("User")

    def __repr__(self):
        return f"<Payment {self.payment_id} {self.status} {self.amount}>"
