"""Messages API — public contact form plus the admin inbox."""
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import admin_only, page_params
from app.api.schemas import ApiModel
from app.api.serializers import envelope, message_out
from app.models.base import get_db
from app.services.message_service import MessageService
from app.utils.pagination import PageParams

router = APIRouter(prefix="/messages", tags=["messages"])


class MessageCreate(ApiModel):
    sender: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class MessageStatusUpdate(ApiModel):
    status: str


class MessageReply(ApiModel):
    reply_body: Optional[str] = None


# ── Public ───────────────────────────────────────────────

@router.post("", status_code=201)
def create_message(body: MessageCreate, db: Session = Depends(get_db)):
    """Contact form submission; no login required."""
    message = MessageService(db).create_public(body.sender, body.email, body.subject, body.body)
    return envelope(message=message_out(message))


# ── Admin ────────────────────────────────────────────────

@router.get("/summary", dependencies=[Depends(admin_only)])
def message_summary(db: Session = Depends(get_db)):
    return envelope(**MessageService(db).summary())


@router.get("", dependencies=[Depends(admin_only)])
def list_messages(
    search: Optional[str] = None,
    status: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    messages, pagination = MessageService(db).list_messages(params, search, status)
    return envelope(messages=[message_out(m) for m in messages], pagination=pagination)


@router.put("/{message_id}", dependencies=[Depends(admin_only)])
@router.put("/{message_id}/status", dependencies=[Depends(admin_only)])
def update_message_status(message_id: int, body: MessageStatusUpdate, db: Session = Depends(get_db)):
    message = MessageService(db).update_status(message_id, body.status)
    return envelope(message=message_out(message))


@router.delete("/{message_id}", status_code=204, dependencies=[Depends(admin_only)])
def delete_message(message_id: int, db: Session = Depends(get_db)):
    MessageService(db).delete(message_id)
    return Response(status_code=204)


@router.post("/{message_id}/reply", dependencies=[Depends(admin_only)])
def reply_to_message(message_id: int, body: MessageReply, db: Session = Depends(get_db)):
    """Email the reply, then mark the message Replied. A failed send leaves it untouched."""
    message = MessageService(db).reply(message_id, body.reply_body)
    return {
        "status": "success",
        "message": "Reply sent successfully.",
        "data": {"message": message_out(message)},
    }
