"""Notifications API — the current user's unread notifications."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.api.serializers import envelope, notification_out
from app.models.base import get_db
from app.models.user import User
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    notifications = NotificationService(db).unread_for(user)
    return envelope(notifications=[notification_out(n) for n in notifications])


@router.patch("/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = NotificationService(db).mark_read(user, notification_id)
    return envelope(notification=notification_out(notification))
