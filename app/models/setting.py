"""
Company-wide settings.

Exactly one row exists, identified by ``key == SETTINGS_KEY``. Always go
through ``SettingService.get_or_create`` rather than querying directly.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, JSON

from app.models.base import Base

SETTINGS_KEY = "main"

DEFAULT_SOCIAL_LINKS = {
    "facebook": "",
    "whatsapp": "",
    "instagram": "",
    "linkedin": "",
}

DEFAULT_NOTIFICATION_TOGGLES = {
    "emailAlertsNewShipments": True,
    "emailAlertsNewMessages": False,
    "emailAlertsPaymentConfirmations": True,
    "whatsappNotifications": False,
}

DEFAULT_THEME = {
    "darkMode": False,
    "accentColor": "yellow",
}


class Setting(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(20), unique=True, nullable=False, default=SETTINGS_KEY)

    # Company info
    company_name = Column(String, nullable=False, default="BongoExpress")
    company_email = Column(String, nullable=False, default="info@bongoexpress.com")
    company_phone = Column(String, nullable=False, default="+254 711 111 111")
    address = Column(String, nullable=False, default="123 Logistics Lane, Nairobi")
    website = Column(String, nullable=False, default="https://bongoexpress.com")
    logo = Column(String, nullable=True)

    social_links = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_SOCIAL_LINKS))
    notifications = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_NOTIFICATION_TOGGLES))
    theme = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_THEME))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
