"""
Shipment Service

Admin-side shipment management: paginated listing, summary counts,
creation with server-assigned id/cost/tracking, partial updates and deletes.
"""
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased, joinedload

from app.exceptions import NotFoundError, ValidationError
from app.models.lifecycle import delete_shipment
from app.models.shipment import (
    Shipment,
    SHIPMENT_STATUSES,
    SHIPMENT_PENDING,
    SHIPMENT_IN_TRANSIT,
    SHIPMENT_DELIVERED,
    SHIPMENT_DELAYED,
    SHIPMENT_CANCELLED,
    shipment_cost,
)
from app.models.user import User, ROLE_AGENT, ROLE_CUSTOMER
from app.utils.logger import log
from app.utils.pagination import PageParams, paginate, search_clause, is_filter_set

# Fields an update may touch; shipment_id, cost and customer are fixed at creation
MUTABLE_FIELDS = ("origin", "destination", "status", "weight", "package_details", "dispatch_date")


def validate_status(status: str) -> str:
    if status not in SHIPMENT_STATUSES:
        raise ValidationError(
            f"Invalid shipment status '{status}'. Use one of: {', '.join(SHIPMENT_STATUSES)}"
        )
    return status


def validate_weight(weight) -> None:
    if weight is not None and weight < 0:
        raise ValidationError("Weight cannot be negative")


class ShipmentService:
    """Service for the admin shipment screens"""

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Shipment).options(
            joinedload(Shipment.customer), joinedload(Shipment.agent)
        )

    def list_shipments(
        self,
        params: PageParams,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[List[Shipment], Dict]:
        """Page of shipments, newest first; search covers id, route and customer name."""
        customer = aliased(User)
        query = self._base_query().join(customer, Shipment.customer_id == customer.id)

        clause = search_clause(
            search,
            Shipment.shipment_id,
            Shipment.origin,
            Shipment.destination,
            customer.name,
        )
        if clause is not None:
            query = query.filter(clause)
        if is_filter_set(status):
            query = query.filter(Shipment.status == status)

        query = query.order_by(Shipment.created_at.desc(), Shipment.id.desc())
        return paginate(query, params)

    def summary(self) -> Dict:
        """Counts over the whole collection; independent of any list filter."""
        counts = self._status_counts()
        return {
            "totalShipments": sum(counts.values()),
            "inTransit": counts.get(SHIPMENT_IN_TRANSIT, 0),
            "delivered": counts.get(SHIPMENT_DELIVERED, 0),
            "pending": counts.get(SHIPMENT_PENDING, 0) + counts.get(SHIPMENT_DELAYED, 0),
            "cancelled": counts.get(SHIPMENT_CANCELLED, 0),
        }

    def _status_counts(self) -> Dict[str, int]:
        rows = (
            self.db.query(Shipment.status, func.count(Shipment.id))
            .group_by(Shipment.status)
            .all()
        )
        return {status: count for status, count in rows}

    def get(self, key: str | int) -> Shipment:
        """Look up by numeric id or by the public ``SHP…`` reference."""
        query = self._base_query()
        key = str(key).strip()
        if key.isdigit():
            shipment = query.filter(Shipment.id == int(key)).first()
        else:
            shipment = query.filter(Shipment.shipment_id == key.upper()).first()
        if not shipment:
            raise NotFoundError("No shipment found with that ID")
        return shipment

    def _resolve_customer(self, customer_id: Optional[int], customer_name: Optional[str]) -> User:
        query = self.db.query(User).filter(User.role == ROLE_CUSTOMER)
        if customer_id is not None:
            customer = query.filter(User.id == customer_id).first()
        elif customer_name:
            customer = query.filter(User.name == customer_name).order_by(User.id).first()
        else:
            raise ValidationError("Please provide a customer")
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    def _resolve_agent(self, agent_id: Optional[int]) -> Optional[User]:
        if agent_id is None:
            return None
        agent = self.db.query(User).filter(User.id == agent_id, User.role == ROLE_AGENT).first()
        if not agent:
            raise NotFoundError("Agent not found")
        return agent

    def build(
        self,
        customer: User,
        origin: str,
        destination: str,
        weight: Optional[float] = None,
        package_details: Optional[str] = None,
        status: str = SHIPMENT_PENDING,
        agent: Optional[User] = None,
        dispatch_date: Optional[datetime] = None,
    ) -> Shipment:
        """
        Construct (and add, without committing) a shipment with its
        server-assigned cost and first tracking entry.
        """
        if not origin or not destination:
            raise ValidationError("Origin and destination are required")
        validate_status(status)
        validate_weight(weight)

        shipment = Shipment(
            customer=customer,
            agent=agent,
            origin=origin,
            destination=destination,
            weight=weight,
            package_details=package_details,
            status=status,
            cost=shipment_cost(weight),
            tracking_history=[],
        )
        if dispatch_date:
            shipment.dispatch_date = dispatch_date
        shipment.add_tracking_entry(status, origin)
        self.db.add(shipment)
        return shipment

    def create(
        self,
        origin: str,
        destination: str,
        customer_id: Optional[int] = None,
        customer_name: Optional[str] = None,
        agent_id: Optional[int] = None,
        **fields,
    ) -> Shipment:
        customer = self._resolve_customer(customer_id, customer_name)
        agent = self._resolve_agent(agent_id)
        shipment = self.build(
            customer,
            origin,
            destination,
            agent=agent,
            **{k: v for k, v in fields.items() if v is not None},
        )
        self.db.commit()
        self.db.refresh(shipment)
        log.info(f"Created shipment {shipment.shipment_id} for {customer.name} (cost {shipment.cost})")
        return shipment

    def update(self, key: str | int, changes: Dict) -> Shipment:
        """
        Partial update of mutable fields.

        A status change appends a tracking entry; its location is
        ``changes['location']`` when given, else the destination for
        deliveries and the origin otherwise.
        """
        shipment = self.get(key)
        previous_status = shipment.status

        if "status" in changes and changes["status"] is not None:
            validate_status(changes["status"])
        validate_weight(changes.get("weight"))
        if "agent_id" in changes:
            shipment.agent = self._resolve_agent(changes["agent_id"])

        for field in MUTABLE_FIELDS:
            if field in changes and changes[field] is not None:
                setattr(shipment, field, changes[field])

        if shipment.status != previous_status:
            location = changes.get("location") or (
                shipment.destination if shipment.status == SHIPMENT_DELIVERED else shipment.origin
            )
            shipment.add_tracking_entry(shipment.status, location)

        self.db.commit()
        self.db.refresh(shipment)
        log.info(f"Updated shipment {shipment.shipment_id}")
        return shipment

    def delete(self, key: str | int) -> None:
        delete_shipment(self.db, self.get(key))
