"""Payments API (admin) — ledger, summary, revenue chart, receipts."""
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import admin_only, page_params
from app.api.schemas import ApiModel
from app.api.serializers import envelope, payment_out
from app.models.base import get_db
from app.models.payment import Payment
from app.services.payment_service import PaymentService
from app.services.receipt_pdf import generate_receipt_pdf
from app.services.setting_service import SettingService
from app.utils.pagination import PageParams

router = APIRouter(prefix="/payments", tags=["payments"], dependencies=[Depends(admin_only)])


class PaymentCreate(ApiModel):
    shipment_id: str
    method: str
    amount: Optional[float] = None
    status: Optional[str] = None


def receipt_response(db: Session, payment: Payment) -> Response:
    """Render ``payment``'s receipt as a PDF download."""
    pdf = generate_receipt_pdf(payment, SettingService(db).get_or_create())
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{payment.payment_id}.pdf"'},
    )


@router.get("/summary")
def payment_summary(db: Session = Depends(get_db)):
    return envelope(**PaymentService(db).summary())


@router.get("/chart-data")
def payment_chart_data(db: Session = Depends(get_db)):
    """Completed revenue per month, trailing twelve months."""
    return envelope(chartData=PaymentService(db).chart_data())


@router.get("")
def list_payments(
    search: Optional[str] = None,
    status: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    payments, pagination = PaymentService(db).list_payments(params, search, status)
    return envelope(payments=[payment_out(p) for p in payments], pagination=pagination)


@router.post("", status_code=201)
def create_payment(body: PaymentCreate, db: Session = Depends(get_db)):
    payment = PaymentService(db).create(body.shipment_id, body.method, amount=body.amount, status=body.status)
    return envelope(payment=payment_out(payment))


@router.get("/{payment_id}/invoice")
def payment_invoice(payment_id: int, db: Session = Depends(get_db)):
    return receipt_response(db, PaymentService(db).get(payment_id))
