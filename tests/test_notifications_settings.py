"""
Notification and company settings tests.
"""
from app.models.notification import Notification
from app.models.payment import Payment
from app.models.setting import Setting
from app.models.user import ROLE_ADMIN


# ---------------------------------------------------------------------------
# Booking fans out notifications
# ---------------------------------------------------------------------------

def test_customer_booking_creates_invoice_and_notifies_admins(client, db, admin, make_user, customer_headers):
    second_admin = make_user(ROLE_ADMIN)
    resp = client.post(
        "/api/customer-dashboard/shipments",
        headers=customer_headers,
        json={"origin": "Nairobi", "destination": "Nakuru", "weight": 6, "packageDetails": "Books"},
    )
    assert resp.status_code == 201
    shipment = resp.json()["data"]["shipment"]
    assert shipment["status"] == "Pending"
    assert shipment["cost"] == 30

    db.expire_all()
    payment = db.query(Payment).one()
    assert payment.status == "Pending"
    assert payment.amount == 30

    recipients = {n.user_id for n in db.query(Notification).all()}
    assert recipients == {admin.id, second_admin.id}
    assert shipment["shipmentId"] in db.query(Notification).first().text


def test_unread_notifications_and_mark_read(client, db, admin, admin_headers):
    older = Notification(user_id=admin.id, text="first")
    newer = Notification(user_id=admin.id, text="second")
    db.add_all([older, newer])
    db.commit()

    listed = client.get("/api/notifications", headers=admin_headers).json()["data"]["notifications"]
    assert {n["text"] for n in listed} == {"first", "second"}

    resp = client.patch(f"/api/notifications/{older.id}/read", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["notification"]["read"] is True

    # marking twice is harmless and never flips back
    again = client.patch(f"/api/notifications/{older.id}/read", headers=admin_headers)
    assert again.json()["data"]["notification"]["read"] is True

    listed = client.get("/api/notifications", headers=admin_headers).json()["data"]["notifications"]
    assert [n["text"] for n in listed] == ["second"]


def test_cannot_read_someone_elses_notification(client, db, admin, customer_headers):
    note = Notification(user_id=admin.id, text="admin only")
    db.add(note)
    db.commit()
    assert client.patch(f"/api/notifications/{note.id}/read", headers=customer_headers).status_code == 404
    assert client.get("/api/notifications", headers=customer_headers).json()["data"]["notifications"] == []


# ---------------------------------------------------------------------------
# Settings singleton
# ---------------------------------------------------------------------------

def test_settings_created_with_defaults_once(client, db, admin_headers):
    first = client.get("/api/settings", headers=admin_headers).json()["data"]["settings"]
    client.get("/api/settings", headers=admin_headers)
    assert first["companyName"] == "BongoExpress"
    assert first["theme"] == {"darkMode": False, "accentColor": "yellow"}
    db.expire_all()
    assert db.query(Setting).count() == 1


def test_settings_update_merges_nested_groups(client, admin_headers):
    resp = client.put(
        "/api/settings",
        headers=admin_headers,
        json={
            "companyPhone": "+254 722 000 000",
            "socialLinks": {"facebook": "https://facebook.com/bongo"},
            "theme": {"darkMode": True},
        },
    )
    assert resp.status_code == 200
    settings = resp.json()["data"]["settings"]
    assert settings["companyPhone"] == "+254 722 000 000"
    assert settings["companyName"] == "BongoExpress"
    assert settings["socialLinks"]["facebook"] == "https://facebook.com/bongo"
    assert settings["socialLinks"]["whatsapp"] == ""
    assert settings["theme"] == {"darkMode": True, "accentColor": "yellow"}

    reread = client.get("/api/settings", headers=admin_headers).json()["data"]["settings"]
    assert reread["theme"]["darkMode"] is True


def test_settings_rejects_non_object_group(client, admin_headers):
    resp = client.put("/api/settings", headers=admin_headers, json={"theme": "dark"})
    assert resp.status_code == 400
