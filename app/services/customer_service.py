"""
Customer Service

Admin management of customer accounts (users with role ``customer``).
"""
from datetime import datetime
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, ValidationError
from app.models.lifecycle import delete_user
from app.models.shipment import Shipment
from app.models.user import User, ROLE_CUSTOMER, USER_STATUSES, STATUS_ACTIVE, STATUS_INACTIVE
from app.services import auth_service
from app.utils.helpers import month_start
from app.utils.pagination import PageParams, paginate, search_clause, is_filter_set

# Editable through the admin screen; role and password are not
EDITABLE_FIELDS = ("name", "email", "phone", "location", "status")


def validate_user_status(status: str) -> str:
    if status not in USER_STATUSES:
        raise ValidationError(f"Invalid status '{status}'. Use one of: {', '.join(USER_STATUSES)}")
    return status


def apply_profile_changes(db: Session, user: User, changes: Dict) -> None:
    """Copy the editable profile fields from ``changes`` onto ``user``."""
    for field in EDITABLE_FIELDS:
        value = changes.get(field)
        if value is None:
            continue
        if field == "email":
            auth_service.ensure_email_available(db, value, exclude_user_id=user.id)
            value = auth_service.normalize_email(value)
        if field == "status":
            validate_user_status(value)
        setattr(user, field, value)


class CustomerService:
    def __init__(self, db: Session):
        self.db = db

    def _customers(self):
        return self.db.query(User).filter(User.role == ROLE_CUSTOMER)

    def list_customers(
        self,
        params: PageParams,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[List[tuple], Dict]:
        """Page of customers with each one's shipment count."""
        query = self._customers()
        clause = search_clause(search, User.name, User.email)
        if clause is not None:
            query = query.filter(clause)
        if is_filter_set(status):
            query = query.filter(User.status == status)
        query = query.order_by(User.created_at.desc(), User.id.desc())

        customers, pagination = paginate(query, params)
        counts = self._shipment_counts([c.id for c in customers])
        return [(c, counts.get(c.id, 0)) for c in customers], pagination

    def _shipment_counts(self, customer_ids: List[int]) -> Dict[int, int]:
        if not customer_ids:
            return {}
        rows = (
            self.db.query(Shipment.customer_id, func.count(Shipment.id))
            .filter(Shipment.customer_id.in_(customer_ids))
            .group_by(Shipment.customer_id)
            .all()
        )
        return dict(rows)

    def summary(self) -> Dict:
        now = datetime.utcnow()
        this_month = month_start(now)
        next_month = this_month + relativedelta(months=1)
        return {
            "total": self._customers().count(),
            "active": self._customers().filter(User.status == STATUS_ACTIVE).count(),
            "inactive": self._customers().filter(User.status == STATUS_INACTIVE).count(),
            "shipmentsThisMonth": (
                self.db.query(Shipment)
                .filter(Shipment.dispatch_date >= this_month, Shipment.dispatch_date < next_month)
                .count()
            ),
        }

    def get(self, customer_id: int) -> User:
        customer = self._customers().filter(User.id == customer_id).first()
        if not customer:
            raise NotFoundError("No customer found with that ID")
        return customer

    def create(
        self,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        location: Optional[str] = None,
    ) -> User:
        return auth_service.create_user(
            self.db, name, email, password, role=ROLE_CUSTOMER, phone=phone, location=location
        )

    def update(self, customer_id: int, changes: Dict) -> User:
        customer = self.get(customer_id)
        apply_profile_changes(self.db, customer, changes)
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def delete(self, customer_id: int) -> None:
        delete_user(self.db, self.get(customer_id))
