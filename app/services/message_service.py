"""
Message Service

Contact-form inbox for admins, plus the customer's own message thread.
"""
import html
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.exceptions import NotFoundError, ValidationError
from app.models.message import (
    Message,
    MESSAGE_STATUSES,
    MESSAGE_UNREAD,
    MESSAGE_REPLIED,
    MESSAGE_SPAM,
)
from app.models.user import User
from app.services import auth_service, mail_service
from app.utils.logger import log
from app.utils.pagination import PageParams, paginate, search_clause, is_filter_set


def reply_html(sender: str, reply_body: str) -> str:
    return (
        f"<p>Hello {html.escape(sender)},</p>"
        f"<p>{html.escape(reply_body)}</p>"
        "<p>Best regards,<br/>BongoExpress Team</p>"
    )


class MessageService:
    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Message).options(joinedload(Message.user))

    def list_messages(
        self,
        params: PageParams,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> tuple[List[Message], Dict]:
        query = self._base_query()
        clause = search_clause(search, Message.sender, Message.email, Message.subject, Message.body)
        if clause is not None:
            query = query.filter(clause)
        if is_filter_set(status):
            query = query.filter(Message.status == status)
        query = query.order_by(Message.created_at.desc(), Message.id.desc())
        return paginate(query, params)

    def summary(self) -> Dict:
        def count(status=None):
            query = self.db.query(Message)
            if status:
                query = query.filter(Message.status == status)
            return query.count()

        return {
            "totalMessages": count(),
            "unreadMessages": count(MESSAGE_UNREAD),
            "repliedMessages": count(MESSAGE_REPLIED),
            "spamMessages": count(MESSAGE_SPAM),
        }

    def get(self, message_id: int) -> Message:
        message = self._base_query().filter(Message.id == message_id).first()
        if not message:
            raise NotFoundError("Message not found")
        return message

    def create_public(self, sender: str, email: str, subject: str, body: str) -> Message:
        """Contact form submission; linked to the registered user with that email, if any."""
        if not all([sender, email, subject, body]):
            raise ValidationError("Please provide all required fields.")
        email = auth_service.normalize_email(email)
        user = self.db.query(User).filter(User.email == email).first()

        message = Message(sender=sender, email=email, subject=subject, body=body, user=user)
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        log.info(f"New message #{message.id} from {email}")
        return message

    def update_status(self, message_id: int, status: str) -> Message:
        if status not in MESSAGE_STATUSES:
            raise ValidationError("Invalid status provided")
        message = self.get(message_id)
        if status == MESSAGE_REPLIED and not message.reply:
            raise ValidationError(
                "A message is marked Replied by sending a reply. Use POST /api/messages/{id}/reply."
            )
        message.status = status
        self.db.commit()
        self.db.refresh(message)
        return message

    def delete(self, message_id: int) -> None:
        message = self.get(message_id)
        self.db.delete(message)
        self.db.commit()

    def reply(self, message_id: int, reply_body: str) -> Message:
        """
        Email a reply to the sender, then mark the message Replied.

        The mail goes out first; if it fails MailDeliveryError propagates and
        the message is left exactly as it was.
        """
        message = self.get(message_id)
        if not reply_body:
            raise ValidationError("Reply body is required.")

        mail_service.send_email(
            to=message.email,
            subject=f"Re: {message.subject}",
            html=reply_html(message.sender, reply_body),
        )

        message.status = MESSAGE_REPLIED
        message.reply = reply_body
        self.db.commit()
        self.db.refresh(message)
        log.info(f"Replied to message #{message.id}")
        return message

    # ── Customer's own messages ───────────────────────────

    def list_for_user(self, user: User) -> List[Message]:
        return (
            self._base_query()
            .filter(Message.user_id == user.id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .all()
        )

    def create_for_user(self, user: User, subject: str, body: str) -> Message:
        if not subject or not body:
            raise ValidationError("Subject and message body are required.")
        message = Message(sender=user.name, email=user.email, subject=subject, body=body, user=user)
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        log.info(f"Customer {user.id} sent message #{message.id}")
        return message

    def delete_for_user(self, user: User, message_id: int) -> None:
        message = (
            self.db.query(Message)
            .filter(Message.id == message_id, Message.user_id == user.id)
            .first()
        )
        if not message:
            raise NotFoundError("Message not found")
        self.db.delete(message)
        self.db.commit()
