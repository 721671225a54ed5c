"""
Customer Dashboard Service

Everything a logged-in customer can see or do with their own shipments.
Records belonging to other customers behave as if they did not exist.
"""
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.exceptions import NotFoundError
from app.models.payment import Payment, PAYMENT_PENDING
from app.models.shipment import (
    Shipment,
    SHIPMENT_PENDING,
    SHIPMENT_IN_TRANSIT,
    SHIPMENT_DELIVERED,
    SHIPMENT_DELAYED,
)
from app.models.user import User
from app.services.notification_service import NotificationService
from app.services.shipment_service import ShipmentService
from app.utils.logger import log
from app.utils.pagination import PageParams, paginate, search_clause, is_filter_set

OPEN_STATUSES = (SHIPMENT_PENDING, SHIPMENT_IN_TRANSIT, SHIPMENT_DELAYED)
RECENT_SHIPMENTS = 5
# Method recorded on the invoice until the customer picks one at payment time
DEFAULT_PAYMENT_METHOD = "M-Pesa"


class CustomerDashboardService:
    def __init__(self, db: Session, customer: User):
        self.db = db
        self.customer = customer

    def _my_shipments(self):
        return (
            self.db.query(Shipment)
            .options(joinedload(Shipment.customer), joinedload(Shipment.agent))
            .filter(Shipment.customer_id == self.customer.id)
        )

    def stats(self) -> Dict:
        mine = self._my_shipments()
        recent = (
            mine.order_by(Shipment.created_at.desc(), Shipment.id.desc())
            .limit(RECENT_SHIPMENTS)
            .all()
        )
        return {
            "metrics": {
                "totalShipments": mine.order_by(None).count(),
                "deliveredShipments": mine.filter(Shipment.status == SHIPMENT_DELIVERED).count(),
                "pendingShipments": mine.filter(Shipment.status.in_(OPEN_STATUSES)).count(),
            },
            "recentShipments": recent,
        }

    def list_shipments(
        self,
        params: PageParams,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[List[Shipment], Dict]:
        query = self._my_shipments()
        clause = search_clause(search, Shipment.shipment_id)
        if clause is not None:
            query = query.filter(clause)
        if is_filter_set(status):
            query = query.filter(Shipment.status == status)
        query = query.order_by(Shipment.created_at.desc(), Shipment.id.desc())
        return paginate(query, params)

    def get_shipment(self, key: str | int) -> Shipment:
        key = str(key).strip()
        query = self._my_shipments()
        if key.isdigit():
            shipment = query.filter(Shipment.id == int(key)).first()
        else:
            shipment = query.filter(Shipment.shipment_id == key.upper()).first()
        if not shipment:
            raise NotFoundError("Shipment not found or you do not have permission to view it.")
        return shipment

    def book_shipment(
        self,
        origin: str,
        destination: str,
        weight: Optional[float] = None,
        package_details: Optional[str] = None,
    ) -> Shipment:
        """
        Book a shipment for the customer.

        One transaction writes the shipment, its Pending invoice and a
        notification for every admin.
        """
        shipment = ShipmentService(self.db).build(
            self.customer,
            origin,
            destination,
            weight=weight,
            package_details=package_details,
            status=SHIPMENT_PENDING,
        )
        self.db.flush()

        self.db.add(Payment(
            shipment=shipment,
            customer_id=self.customer.id,
            amount=shipment.cost,
            method=DEFAULT_PAYMENT_METHOD,
            status=PAYMENT_PENDING,
        ))
        NotificationService(self.db).notify_admins(
            f"New shipment ({shipment.shipment_id}) booked by {self.customer.name}.",
            link="/admin/dashboard/shipments",
        )
        self.db.commit()
        self.db.refresh(shipment)
        log.info(f"Customer {self.customer.id} booked shipment {shipment.shipment_id}")
        return shipment
