"""Database models for the BongoExpress API"""

from app.models.user import User
from app.models.shipment import Shipment
from app.models.payment import Payment
from app.models.message import Message
from app.models.notification import Notification
from app.models.setting import Setting
