"""Customers API (admin)"""
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import admin_only, page_params
from app.api.schemas import ApiModel
from app.api.serializers import envelope, user_out
from app.models.base import get_db
from app.services.customer_service import CustomerService
from app.utils.pagination import PageParams

router = APIRouter(prefix="/customers", tags=["customers"], dependencies=[Depends(admin_only)])


class CustomerCreate(ApiModel):
    name: str
    email: str
    password: str
    phone: Optional[str] = None
    location: Optional[str] = None


class CustomerUpdate(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None


@router.get("/summary")
def customer_summary(db: Session = Depends(get_db)):
    return envelope(**CustomerService(db).summary())


@router.get("")
def list_customers(
    search: Optional[str] = None,
    status: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    rows, pagination = CustomerService(db).list_customers(params, search, status)
    customers = [{**user_out(c), "totalShipments": count} for c, count in rows]
    return envelope(customers=customers, pagination=pagination)


@router.get("/{customer_id}")
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return envelope(customer=user_out(CustomerService(db).get(customer_id)))


@router.post("", status_code=201)
def create_customer(body: CustomerCreate, db: Session = Depends(get_db)):
    customer = CustomerService(db).create(
        body.name, body.email, body.password, phone=body.phone, location=body.location
    )
    return envelope(customer=user_out(customer))


@router.put("/{customer_id}")
def update_customer(customer_id: int, body: CustomerUpdate, db: Session = Depends(get_db)):
    customer = CustomerService(db).update(customer_id, body.changes())
    return envelope(customer=user_out(customer))


@router.delete("/{customer_id}", status_code=204)
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    CustomerService(db).delete(customer_id)
    return Response(status_code=204)
