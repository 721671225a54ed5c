"""
Customer dashboard API.

Every route acts on the logged-in customer's own records; anything owned by
someone else answers 404.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import customer_only, page_params
from app.api.payments import receipt_response
from app.api.schemas import ApiModel
from app.api.serializers import envelope, message_out, payment_out, shipment_out
from app.models.base import get_db
from app.models.user import User
from app.services.customer_dashboard_service import CustomerDashboardService
from app.services.message_service import MessageService
from app.services.payment_service import PaymentService
from app.utils.pagination import PageParams

router = APIRouter(prefix="/customer-dashboard", tags=["customer-dashboard"])


class ShipmentBooking(ApiModel):
    origin: str
    destination: str
    weight: Optional[float] = None
    package_details: Optional[str] = None


class PayRequest(ApiModel):
    method: Optional[str] = None


class CustomerMessageCreate(ApiModel):
    subject: Optional[str] = None
    body: Optional[str] = None


# ── Overview & shipments ─────────────────────────────────

@router.get("/stats")
def customer_stats(user: User = Depends(customer_only), db: Session = Depends(get_db)):
    stats = CustomerDashboardService(db, user).stats()
    return envelope(
        metrics=stats["metrics"],
        recentShipments=[shipment_out(s) for s in stats["recentShipments"]],
    )


@router.get("/shipments")
def customer_shipments(
    search: Optional[str] = None,
    status: Optional[str] = None,
    params: PageParams = Depends(page_params),
    user: User = Depends(customer_only),
    db: Session = Depends(get_db),
):
    shipments, pagination = CustomerDashboardService(db, user).list_shipments(params, search, status)
    return envelope(shipments=[shipment_out(s) for s in shipments], pagination=pagination)


@router.post("/shipments", status_code=201)
def book_shipment(body: ShipmentBooking, user: User = Depends(customer_only), db: Session = Depends(get_db)):
    shipment = CustomerDashboardService(db, user).book_shipment(
        body.origin, body.destination, weight=body.weight, package_details=body.package_details
    )
    return envelope(shipment=shipment_out(shipment))


@router.get("/shipments/{shipment_key}")
def customer_shipment(shipment_key: str, user: User = Depends(customer_only), db: Session = Depends(get_db)):
    return envelope(shipment=shipment_out(CustomerDashboardService(db, user).get_shipment(shipment_key)))


# ── Payments ─────────────────────────────────────────────

@router.get("/payments/summary")
def customer_payment_summary(user: User = Depends(customer_only), db: Session = Depends(get_db)):
    return envelope(**PaymentService(db).customer_summary(user.id))


@router.get("/payments")
def customer_payments(
    search: Optional[str] = None,
    status: Optional[str] = None,
    params: PageParams = Depends(page_params),
    user: User = Depends(customer_only),
    db: Session = Depends(get_db),
):
    payments, pagination = PaymentService(db).list_payments(params, search, status, customer_id=user.id)
    return envelope(payments=[payment_out(p) for p in payments], pagination=pagination)


@router.get("/payments/{payment_id}/invoice")
def customer_invoice(payment_id: int, user: User = Depends(customer_only), db: Session = Depends(get_db)):
    return receipt_response(db, PaymentService(db).get(payment_id, customer_id=user.id))


@router.post("/payments/{payment_id}/pay")
def pay_invoice(
    payment_id: int,
    body: Optional[PayRequest] = None,
    user: User = Depends(customer_only),
    db: Session = Depends(get_db),
):
    """Settle a Pending payment. A second attempt gets 404."""
    method = body.method if body else None
    payment = PaymentService(db).pay(payment_id, user.id, method=method)
    return {
        "status": "success",
        "message": "Payment successful.",
        "data": {"payment": payment_out(payment)},
    }


# ── Messages ─────────────────────────────────────────────

@router.get("/messages")
def customer_messages(user: User = Depends(customer_only), db: Session = Depends(get_db)):
    return envelope(messages=[message_out(m) for m in MessageService(db).list_for_user(user)])


@router.post("/messages", status_code=201)
def send_customer_message(
    body: CustomerMessageCreate,
    user: User = Depends(customer_only),
    db: Session = Depends(get_db),
):
    message = MessageService(db).create_for_user(user, body.subject, body.body)
    return envelope(message=message_out(message))


@router.delete("/messages/{message_id}", status_code=204)
def delete_customer_message(message_id: int, user: User = Depends(customer_only), db: Session = Depends(get_db)):
    MessageService(db).delete_for_user(user, message_id)
    return Response(status_code=204)
