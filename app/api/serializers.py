"""Model -> JSON dict converters (camelCase keys, as the dashboard expects)."""
from app.models.message import Message
from app.models.notification import Notification
from app.models.payment import Payment
from app.models.setting import Setting
from app.models.shipment import Shipment
from app.models.user import User
from app.utils.helpers import isoformat


def user_ref(u: User | None) -> dict | None:
    if u is None:
        return None
    return {"id": u.id, "name": u.name, "email": u.email}


def user_out(u: User) -> dict:
    # password_hash is intentionally absent
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "status": u.status,
        "phone": u.phone,
        "location": u.location,
        "profilePicture": u.profile_picture,
        "createdAt": isoformat(u.created_at),
        "updatedAt": isoformat(u.updated_at),
    }


def shipment_out(s: Shipment) -> dict:
    return {
        "id": s.id,
        "shipmentId": s.shipment_id,
        "customer": user_ref(s.customer),
        "agent": user_ref(s.agent),
        "origin": s.origin,
        "destination": s.destination,
        "status": s.status,
        "dispatchDate": isoformat(s.dispatch_date),
        "weight": s.weight,
        "packageDetails": s.package_details,
        "cost": s.cost,
        "trackingHistory": list(s.tracking_history or []),
        "createdAt": isoformat(s.created_at),
        "updatedAt": isoformat(s.updated_at),
    }


def payment_out(p: Payment) -> dict:
    shipment = p.shipment
    return {
        "id": p.id,
        "paymentId": p.payment_id,
        "shipment": {
            "id": shipment.id,
            "shipmentId": shipment.shipment_id,
            "origin": shipment.origin,
            "destination": shipment.destination,
        } if shipment else None,
        "customer": user_ref(p.customer),
        "amount": p.amount,
        "method": p.method,
        "status": p.status,
        "transactionDate": isoformat(p.transaction_date),
        "transactionRef": p.transaction_ref,
        "createdAt": isoformat(p.created_at),
    }


def message_out(m: Message) -> dict:
    return {
        "id": m.id,
        "sender": m.sender,
        "email": m.email,
        "subject": m.subject,
        "body": m.body,
        "status": m.status,
        "reply": m.reply,
        "user": user_ref(m.user),
        "createdAt": isoformat(m.created_at),
        "updatedAt": isoformat(m.updated_at),
    }


def notification_out(n: Notification) -> dict:
    return {
        "id": n.id,
        "text": n.text,
        "link": n.link,
        "read": n.read,
        "createdAt": isoformat(n.created_at),
    }


def setting_out(s: Setting) -> dict:
    return {
        "companyName": s.company_name,
        "companyEmail": s.company_email,
        "companyPhone": s.company_phone,
        "address": s.address,
        "website": s.website,
        "logo": s.logo,
        "socialLinks": dict(s.social_links or {}),
        "notifications": dict(s.notifications or {}),
        "theme": dict(s.theme or {}),
        "updatedAt": isoformat(s.updated_at),
    }


def envelope(**data) -> dict:
    """Success envelope: ``{"status": "success", "data": {...}}``"""
    return {"status": "success", "data": data}
