"""Shipments API (admin) — list, summary, create, update, delete."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import admin_only, page_params
from app.api.schemas import ApiModel
from app.api.serializers import envelope, shipment_out
from app.models.base import get_db
from app.services.shipment_service import ShipmentService
from app.utils.pagination import PageParams

router = APIRouter(prefix="/shipments", tags=["shipments"], dependencies=[Depends(admin_only)])


class ShipmentCreate(ApiModel):
    origin: str
    destination: str
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    agent_id: Optional[int] = None
    weight: Optional[float] = None
    package_details: Optional[str] = None
    status: Optional[str] = None
    dispatch_date: Optional[datetime] = None


class ShipmentUpdate(ApiModel):
    origin: Optional[str] = None
    destination: Optional[str] = None
    status: Optional[str] = None
    weight: Optional[float] = None
    package_details: Optional[str] = None
    agent_id: Optional[int] = None
    dispatch_date: Optional[datetime] = None
    # Where the parcel is when the status changes
    location: Optional[str] = None


@router.get("/summary")
def shipment_summary(db: Session = Depends(get_db)):
    return envelope(**ShipmentService(db).summary())


@router.get("")
def list_shipments(
    search: Optional[str] = None,
    status: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    shipments, pagination = ShipmentService(db).list_shipments(params, search, status)
    return envelope(shipments=[shipment_out(s) for s in shipments], pagination=pagination)


@router.get("/{shipment_key}")
def get_shipment(shipment_key: str, db: Session = Depends(get_db)):
    """Fetch by numeric id or by shipment reference (``SHP…``)."""
    return envelope(shipment=shipment_out(ShipmentService(db).get(shipment_key)))


@router.post("", status_code=201)
def create_shipment(body: ShipmentCreate, db: Session = Depends(get_db)):
    fields = body.model_dump(exclude={"origin", "destination", "customer_id", "customer_name", "agent_id"})
    shipment = ShipmentService(db).create(
        body.origin,
        body.destination,
        customer_id=body.customer_id,
        customer_name=body.customer_name,
        agent_id=body.agent_id,
        **fields,
    )
    return envelope(shipment=shipment_out(shipment))


@router.put("/{shipment_key}")
def update_shipment(shipment_key: str, body: ShipmentUpdate, db: Session = Depends(get_db)):
    shipment = ShipmentService(db).update(shipment_key, body.changes())
    return envelope(shipment=shipment_out(shipment))


@router.delete("/{shipment_key}", status_code=204)
def delete_shipment(shipment_key: str, db: Session = Depends(get_db)):
    ShipmentService(db).delete(shipment_key)
    return Response(status_code=204)
