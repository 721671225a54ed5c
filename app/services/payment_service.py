"""
Payment Service

Admin payment ledger plus the customer-facing payment actions.
"""
import secrets
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased, joinedload

from app.exceptions import NotFoundError, ValidationError
from app.models.payment import (
    Payment,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    PAYMENT_COMPLETED,
    PAYMENT_PENDING,
    PAYMENT_FAILED,
    PAYMENT_REFUNDED,
)
from app.models.shipment import Shipment
from app.models.user import User
from app.services.aggregates import group_by_month, scalar_sum
from app.utils.helpers import month_label, trailing_months
from app.utils.logger import log
from app.utils.pagination import PageParams, paginate, search_clause, is_filter_set

CHART_MONTHS = 12


def validate_method(method: str) -> str:
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment method '{method}'. Use one of: {', '.join(PAYMENT_METHODS)}")
    return method


def validate_payment_status(status: str) -> str:
    if status not in PAYMENT_STATUSES:
        raise ValidationError(f"Invalid payment status '{status}'. Use one of: {', '.join(PAYMENT_STATUSES)}")
    return status


def new_transaction_ref() -> str:
    return f"TXN-{secrets.token_hex(6).upper()}"


class PaymentService:
    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Payment).options(
            joinedload(Payment.customer), joinedload(Payment.shipment)
        )

    # ── Admin ─────────────────────────────────────────────

    def list_payments(
        self,
        params: PageParams,
        search: Optional[str] = None,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
    ) -> tuple[List[Payment], Dict]:
        """Page of payments, latest transaction first; search covers paymentId and customer name."""
        customer = aliased(User)
        query = self._base_query().join(customer, Payment.customer_id == customer.id)
        if customer_id is not None:
            query = query.filter(Payment.customer_id == customer_id)
        clause = search_clause(search, Payment.payment_id, customer.name)
        if clause is not None:
            query = query.filter(clause)
        if is_filter_set(status):
            query = query.filter(Payment.status == status)
        query = query.order_by(Payment.transaction_date.desc(), Payment.id.desc())
        return paginate(query, params)

    def summary(self) -> Dict:
        return {
            "totalRevenue": scalar_sum(self.db, Payment.amount, Payment.status == PAYMENT_COMPLETED),
            "pendingPayments": scalar_sum(self.db, Payment.amount, Payment.status == PAYMENT_PENDING),
            "completedCount": self.db.query(Payment).filter(Payment.status == PAYMENT_COMPLETED).count(),
            "failedOrRefundedCount": (
                self.db.query(Payment)
                .filter(Payment.status.in_([PAYMENT_FAILED, PAYMENT_REFUNDED]))
                .count()
            ),
        }

    def chart_data(self, months: int = CHART_MONTHS, now: Optional[datetime] = None) -> List[Dict]:
        """Completed revenue per month over the trailing window, zero-filled."""
        window = trailing_months(months, now)
        since = datetime(window[0][0], window[0][1], 1)
        revenue = group_by_month(
            self.db,
            Payment.transaction_date,
            func.sum(Payment.amount),
            Payment.status == PAYMENT_COMPLETED,
            since=since,
        )
        return [
            {"month": f"{month_label(y, m)} '{str(y)[2:]}", "revenue": float(revenue.get((y, m), 0) or 0)}
            for y, m in window
        ]

    def create(
        self,
        shipment_ref: str,
        method: str,
        amount: Optional[float] = None,
        status: Optional[str] = None,
    ) -> Payment:
        """Record a payment against a shipment; the customer comes from the shipment."""
        shipment = (
            self.db.query(Shipment)
            .filter(Shipment.shipment_id == (shipment_ref or "").strip().upper())
            .first()
        )
        if not shipment:
            raise NotFoundError(f"Shipment with ID {shipment_ref} not found")
        validate_method(method)
        status = validate_payment_status(status or PAYMENT_COMPLETED)
        if amount is not None and amount < 0:
            raise ValidationError("Amount cannot be negative")

        payment = Payment(
            shipment=shipment,
            customer_id=shipment.customer_id,
            amount=shipment.cost if amount is None else amount,
            method=method,
            status=status,
        )
        if status == PAYMENT_COMPLETED:
            payment.transaction_ref = new_transaction_ref()
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        log.info(f"Recorded payment {payment.payment_id} ({payment.status}) for {shipment.shipment_id}")
        return payment

    def get(self, payment_id: int, customer_id: Optional[int] = None) -> Payment:
        """Fetch one payment; with ``customer_id`` only that customer's payment matches."""
        query = self._base_query().filter(Payment.id == payment_id)
        if customer_id is not None:
            query = query.filter(Payment.customer_id == customer_id)
        payment = query.first()
        if not payment:
            raise NotFoundError("Payment not found.")
        return payment

    # ── Customer ──────────────────────────────────────────

    def customer_summary(self, customer_id: int) -> Dict:
        mine = Payment.customer_id == customer_id
        return {
            "pendingAmount": scalar_sum(self.db, Payment.amount, mine, Payment.status == PAYMENT_PENDING),
            "completedPayments": (
                self.db.query(Payment).filter(mine, Payment.status == PAYMENT_COMPLETED).count()
            ),
            "totalAmountPaid": scalar_sum(self.db, Payment.amount, mine, Payment.status == PAYMENT_COMPLETED),
            "invoicesGenerated": self.db.query(Payment).filter(mine).count(),
        }

    def pay(self, payment_id: int, customer_id: int, method: Optional[str] = None) -> Payment:
        """
        Settle a pending payment: Pending -> Completed with a transaction ref.

        Done as one conditional UPDATE, so a second call (or a concurrent one)
        matches no row and fails instead of applying twice.
        """
        values = {
            Payment.status: PAYMENT_COMPLETED,
            Payment.transaction_ref: new_transaction_ref(),
            Payment.transaction_date: datetime.utcnow(),
            Payment.updated_at: datetime.utcnow(),
        }
        if method:
            values[Payment.method] = validate_method(method)

        matched = (
            self.db.query(Payment)
            .filter(
                Payment.id == payment_id,
                Payment.customer_id == customer_id,
                Payment.status == PAYMENT_PENDING,
            )
            .update(values, synchronize_session=False)
        )
        if not matched:
            self.db.rollback()
            raise NotFoundError("Payment not found or already processed.")
        self.db.commit()

        payment = self.get(payment_id, customer_id)
        log.info(f"Payment {payment.payment_id} settled ({payment.transaction_ref})")
        return payment


