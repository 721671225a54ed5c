"""
Notification Service

In-app notifications: created for admins when a customer books a shipment,
read by each user for themselves.
"""
from typing import List

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.notification import Notification
from app.models.user import User, ROLE_ADMIN


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def unread_for(self, user: User) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user.id, Notification.read.is_(False))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def mark_read(self, user: User, notification_id: int) -> Notification:
        """Mark one of the user's own notifications as read. Never flips back to unread."""
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user.id)
            .first()
        )
        if not notification:
            raise NotFoundError("Notification not found")
        if not notification.read:
            notification.read = True
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def notify_admins(self, text: str, link: str | None = None) -> int:
        """Queue one notification per admin in the current transaction (caller commits)."""
        admins = self.db.query(User.id).filter(User.role == ROLE_ADMIN).all()
        for (admin_id,) in admins:
            self.db.add(Notification(user_id=admin_id, text=text, link=link))
        return len(admins)
