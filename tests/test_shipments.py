"""
Shipment endpoint tests: creation rules, tracking history, listing
windows, search/filter combination and summary independence.
"""
import re

from app.models.payment import Payment
from app.models.shipment import Shipment


# ---------------------------------------------------------------------------
# Create / read / update
# ---------------------------------------------------------------------------

def test_create_assigns_id_cost_and_first_tracking_entry(client, admin_headers, customer):
    resp = client.post(
        "/api/shipments",
        headers=admin_headers,
        json={"customerId": customer.id, "origin": "Nairobi", "destination": "Kisumu", "weight": 12},
    )
    assert resp.status_code == 201
    shipment = resp.json()["data"]["shipment"]
    assert re.fullmatch(r"SHP[0-9A-Z]{10}", shipment["shipmentId"])
    assert shipment["cost"] == 60
    assert shipment["status"] == "Pending"
    assert shipment["customer"]["name"] == "Jane Wanjiku"
    assert len(shipment["trackingHistory"]) == 1
    assert shipment["trackingHistory"][0]["status"] == "Pending"
    assert shipment["trackingHistory"][0]["location"] == "Nairobi"


def test_cost_has_a_floor_of_twenty(client, admin_headers, customer):
    resp = client.post(
        "/api/shipments",
        headers=admin_headers,
        json={"customerId": customer.id, "origin": "A", "destination": "B", "weight": 1},
    )
    assert resp.json()["data"]["shipment"]["cost"] == 20


def test_create_by_customer_name(client, admin_headers, customer):
    resp = client.post(
        "/api/shipments",
        headers=admin_headers,
        json={"customerName": "Jane Wanjiku", "origin": "A", "destination": "B"},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["shipment"]["customer"]["id"] == customer.id


def test_create_for_unknown_customer_is_404(client, admin_headers):
    resp = client.post(
        "/api/shipments",
        headers=admin_headers,
        json={"customerId": 9999, "origin": "A", "destination": "B"},
    )
    assert resp.status_code == 404


def test_create_with_invalid_status_is_400(client, admin_headers, customer):
    resp = client.post(
        "/api/shipments",
        headers=admin_headers,
        json={"customerId": customer.id, "origin": "A", "destination": "B", "status": "Lost"},
    )
    assert resp.status_code == 400


def test_agent_must_be_an_agent(client, admin_headers, customer, make_user):
    other_customer = make_user()
    resp = client.post(
        "/api/shipments",
        headers=admin_headers,
        json={"customerId": customer.id, "origin": "A", "destination": "B", "agentId": other_customer.id},
    )
    assert resp.status_code == 404


def test_get_by_public_reference_and_numeric_id(client, admin_headers, customer, make_shipment):
    shipment = make_shipment(customer)
    by_ref = client.get(f"/api/shipments/{shipment.shipment_id.lower()}", headers=admin_headers)
    by_id = client.get(f"/api/shipments/{shipment.id}", headers=admin_headers)
    assert by_ref.status_code == by_id.status_code == 200
    assert by_ref.json()["data"]["shipment"]["id"] == shipment.id
    assert by_id.json()["data"]["shipment"]["shipmentId"] == shipment.shipment_id


def test_get_missing_shipment_is_404(client, admin_headers):
    assert client.get("/api/shipments/SHPNOPE", headers=admin_headers).status_code == 404


def test_status_change_appends_tracking_entry(client, admin_headers, customer, agent):
    created = client.post(
        "/api/shipments",
        headers=admin_headers,
        json={"customerId": customer.id, "origin": "Nairobi", "destination": "Mombasa", "weight": 4},
    ).json()["data"]["shipment"]

    moved = client.put(
        f"/api/shipments/{created['id']}",
        headers=admin_headers,
        json={"status": "In Transit", "location": "Voi", "agentId": agent.id},
    ).json()["data"]["shipment"]
    assert moved["agent"]["id"] == agent.id
    assert [t["status"] for t in moved["trackingHistory"]] == ["Pending", "In Transit"]
    assert moved["trackingHistory"][-1]["location"] == "Voi"

    delivered = client.put(
        f"/api/shipments/{created['id']}", headers=admin_headers, json={"status": "Delivered"}
    ).json()["data"]["shipment"]
    assert delivered["trackingHistory"][-1]["status"] == "Delivered"
    assert delivered["trackingHistory"][-1]["location"] == "Mombasa"
    assert len(delivered["trackingHistory"]) == 3


def test_update_without_status_change_keeps_history(client, admin_headers, customer, make_shipment):
    shipment = make_shipment(customer)
    resp = client.put(
        f"/api/shipments/{shipment.id}", headers=admin_headers, json={"packageDetails": "Fragile"}
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["shipment"]["packageDetails"] == "Fragile"
    assert resp.json()["data"]["shipment"]["trackingHistory"] == []


def test_update_ignores_shipment_id_and_cost(client, admin_headers, customer, make_shipment):
    shipment = make_shipment(customer, weight=10)
    resp = client.put(
        f"/api/shipments/{shipment.id}",
        headers=admin_headers,
        json={"shipmentId": "SHPHIJACKED1", "cost": 0, "origin": "Thika"},
    )
    data = resp.json()["data"]["shipment"]
    assert data["shipmentId"] == shipment.shipment_id
    assert data["cost"] == 50
    assert data["origin"] == "Thika"


def test_delete_cascades_payments(client, db, admin_headers, customer, make_shipment, make_payment):
    shipment = make_shipment(customer)
    make_payment(shipment)
    make_payment(shipment, status="Completed")

    resp = client.delete(f"/api/shipments/{shipment.id}", headers=admin_headers)
    assert resp.status_code == 204
    db.expire_all()
    assert db.query(Shipment).count() == 0
    assert db.query(Payment).count() == 0


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def test_pagination_windows_and_totals(client, admin_headers, customer, make_shipment):
    for _ in range(23):
        make_shipment(customer)

    seen = set()
    for page, expected in ((1, 10), (2, 10), (3, 3)):
        body = client.get(f"/api/shipments?page={page}&limit=10", headers=admin_headers).json()["data"]
        assert len(body["shipments"]) == expected
        assert body["pagination"] == {"total": 23, "page": page, "limit": 10, "totalPages": 3}
        seen.update(s["id"] for s in body["shipments"])
    assert len(seen) == 23

    beyond = client.get("/api/shipments?page=9&limit=10", headers=admin_headers).json()["data"]
    assert beyond["shipments"] == []
    assert beyond["pagination"]["total"] == 23


def test_invalid_page_params_are_400(client, admin_headers):
    assert client.get("/api/shipments?page=0", headers=admin_headers).status_code == 400
    assert client.get("/api/shipments?limit=1000", headers=admin_headers).status_code == 400


def test_search_and_status_filter_combine(client, admin_headers, customer, make_user, make_shipment):
    other = make_user(name="Peter Kamau")
    make_shipment(customer, origin="Nairobi", status="Delivered")
    make_shipment(customer, origin="Nairobi", status="Pending")
    make_shipment(other, origin="Eldoret", status="Delivered")

    def ids(query):
        return client.get(f"/api/shipments?{query}", headers=admin_headers).json()["data"]

    assert ids("search=nairobi")["pagination"]["total"] == 2
    assert ids("search=nairobi&status=Delivered")["pagination"]["total"] == 1
    assert ids("search=kamau")["pagination"]["total"] == 1
    assert ids("status=All")["pagination"]["total"] == 3


def test_search_treats_wildcards_literally(client, admin_headers, customer, make_shipment):
    make_shipment(customer, origin="Nairobi")
    resp = client.get("/api/shipments?search=%25", headers=admin_headers).json()["data"]
    assert resp["pagination"]["total"] == 0


def test_summary_ignores_list_filters(client, admin_headers, customer, make_shipment):
    for status in ("Pending", "Delayed", "In Transit", "Delivered", "Delivered", "Cancelled"):
        make_shipment(customer, status=status)

    summary = client.get("/api/shipments/summary?status=Delivered&search=zzz", headers=admin_headers).json()["data"]
    assert summary == {
        "totalShipments": 6,
        "inTransit": 1,
        "delivered": 2,
        "pending": 2,
        "cancelled": 1,
    }
