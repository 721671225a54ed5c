"""Contact-form and customer messages"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.models.base import Base

MESSAGE_UNREAD = "Unread"
MESSAGE_REPLIED = "Replied"
MESSAGE_SPAM = "Spam"
MESSAGE_ARCHIVED = "Archived"
MESSAGE_STATUSES = (MESSAGE_UNREAD, MESSAGE_REPLIED, MESSAGE_SPAM, MESSAGE_ARCHIVED)


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    subject = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=MESSAGE_UNREAD, index=True)
    reply = Column(Text, nullable=True)

    # Set when the sender is a registered user
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User")
