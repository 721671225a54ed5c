"""
Delete policies.

Every relationship that points at a deletable record has an explicit policy
here; the delete helpers below are the only code paths that remove users or
shipments.

    restrict  - refuse the delete while dependants exist
    nullify   - keep dependants, clear their reference
    cascade   - delete dependants with the parent
"""
import logging

from sqlalchemy.orm import Session

from app.exceptions import ValidationError
from app.models.message import Message
from app.models.notification import Notification
from app.models.payment import Payment
from app.models.shipment import Shipment
from app.models.user import User

logger = logging.getLogger(__name__)

RESTRICT = "restrict"
NULLIFY = "nullify"
CASCADE = "cascade"

DELETE_POLICIES = {
    ("user", "shipments.customer_id"): RESTRICT,
    ("user", "payments.customer_id"): RESTRICT,
    ("user", "shipments.agent_id"): NULLIFY,
    ("user", "messages.user_id"): NULLIFY,
    ("user", "notifications.user_id"): CASCADE,
    ("shipment", "payments.shipment_id"): CASCADE,
}


def delete_user(db: Session, user: User) -> None:
    """Delete a user after applying the user delete policies. Commits."""
    owned_shipments = db.query(Shipment).filter(Shipment.customer_id == user.id).count()
    owned_payments = db.query(Payment).filter(Payment.customer_id == user.id).count()
    if owned_shipments or owned_payments:
        raise ValidationError(
            f"Cannot delete {user.name}: they still own {owned_shipments} shipment(s) "
            f"and {owned_payments} payment(s). Delete or reassign those first."
        )

    for shipment in user.assigned_shipments:
        shipment.agent = None
    db.query(Message).filter(Message.user_id == user.id).update(
        {Message.user_id: None}, synchronize_session=False
    )
    db.query(Notification).filter(Notification.user_id == user.id).delete(synchronize_session=False)

    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user.id} ({user.role})")


def delete_shipment(db: Session, shipment: Shipment) -> None:
    """Delete a shipment and, per policy, its payments. Commits."""
    removed = len(shipment.payments)
    for payment in shipment.payments:
        db.delete(payment)
    db.delete(shipment)
    db.commit()
    logger.info(f"Deleted shipment {shipment.shipment_id} and {removed} payment(s)")
