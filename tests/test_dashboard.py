"""
Admin and customer dashboard aggregation tests.
"""
from datetime import datetime

from dateutil.relativedelta import relativedelta

from app.models.user import ROLE_AGENT
from app.services.dashboard_service import DashboardService
from app.utils.helpers import month_label, month_start


def _months_ago(n: int) -> datetime:
    return month_start(datetime.utcnow()) - relativedelta(months=n) + relativedelta(days=2)


def test_metrics(client, admin_headers, customer, make_shipment, make_payment):
    delivered = make_shipment(customer, status="Delivered")
    make_shipment(customer, status="Pending")
    make_shipment(customer, status="In Transit")
    make_shipment(customer, status="Delivered")
    make_payment(delivered, amount=120, status="Completed")
    make_payment(delivered, amount=80, status="Pending")

    data = client.get("/api/dashboard/stats", headers=admin_headers).json()["data"]
    assert data["metrics"] == {
        "totalShipments": 4,
        "totalCustomers": 1,
        "totalRevenue": 120,
        "deliverySuccessRate": 50.0,
    }


def test_empty_database_has_zero_rate(db):
    stats = DashboardService(db).get_stats()
    assert stats["metrics"]["deliverySuccessRate"] == 0
    assert stats["charts"]["topAgents"] == []
    assert stats["recentActivities"] == []


def test_monthly_charts_cover_trailing_six_months(db, customer, make_shipment, make_payment):
    now = datetime.utcnow()
    old = make_shipment(customer, status="Delivered", created_at=_months_ago(2))
    make_shipment(customer, status="Pending", created_at=_months_ago(2))
    make_shipment(customer, status="Delivered", created_at=_months_ago(9))
    make_payment(old, amount=300, status="Completed", transaction_date=_months_ago(2))
    make_payment(old, amount=999, status="Completed", transaction_date=_months_ago(8))

    charts = DashboardService(db).get_stats(now=now)["charts"]

    shipments = charts["shipmentData"]
    assert len(shipments) == 6
    assert shipments[-1]["name"] == now.strftime("%b")
    two_ago = shipments[-3]
    assert two_ago["Delivered"] == 1
    assert two_ago["Pending"] == 1
    assert sum(m["Delivered"] for m in shipments) == 1

    revenue = charts["revenueData"]
    assert [m["name"] for m in revenue] == [m["name"] for m in shipments]
    assert revenue[-3]["revenue"] == 300
    assert sum(m["revenue"] for m in revenue) == 300

    growth = charts["customerGrowthData"]
    assert growth[-1]["customers"] == 1


def test_status_distribution_and_top_agents(db, customer, make_user, make_shipment):
    busy = make_user(ROLE_AGENT, name="Busy")
    quiet = make_user(ROLE_AGENT, name="Quiet")
    for _ in range(3):
        make_shipment(customer, agent=busy, status="Delivered")
    make_shipment(customer, agent=quiet, status="Delivered")
    make_shipment(customer, agent=quiet, status="Cancelled")

    charts = DashboardService(db).get_stats()["charts"]
    distribution = {d["name"]: d["value"] for d in charts["statusDistribution"]}
    assert distribution == {"Delivered": 4, "Cancelled": 1}
    assert charts["topAgents"] == [{"name": "Busy", "deliveries": 3}, {"name": "Quiet", "deliveries": 1}]


def test_recent_activities_merge_newest_first(db, make_user, make_shipment):
    early = make_user(name="Early Customer", created_at=datetime(2025, 1, 1))
    late = make_user(name="Late Customer", created_at=datetime(2025, 3, 1))
    make_shipment(early, created_at=datetime(2025, 2, 1))
    make_shipment(early, created_at=datetime(2025, 4, 1))
    make_shipment(late, created_at=datetime(2025, 5, 1))
    make_shipment(late, created_at=datetime(2024, 12, 1))

    activities = DashboardService(db).get_stats()["recentActivities"]
    assert len(activities) == 4
    stamps = [a["timestamp"] for a in activities]
    assert stamps == sorted(stamps, reverse=True)
    assert [a["type"] for a in activities] == ["shipment", "shipment", "customer", "shipment"]


def test_recent_activity_ids_do_not_collide_across_types(db, make_user, make_shipment):
    customer = make_user(name="First Customer")
    shipment = make_shipment(customer)
    assert customer.id == shipment.id

    activities = DashboardService(db).get_stats()["recentActivities"]
    ids = [a["id"] for a in activities]
    assert sorted(ids) == sorted([f"shipment-{shipment.id}", f"customer-{customer.id}"])
    assert all(a["timestamp"].endswith("Z") for a in activities)


def test_month_label_matches_chart_names():
    assert month_label(2026, 1) == "Jan"


# ---------------------------------------------------------------------------
# Customer dashboard
# ---------------------------------------------------------------------------

def test_customer_stats_are_scoped(client, customer, customer_headers, make_user, make_shipment):
    make_shipment(customer, status="Delivered")
    make_shipment(customer, status="In Transit")
    make_shipment(customer, status="Delayed")
    make_shipment(make_user(), status="Delivered")

    data = client.get("/api/customer-dashboard/stats", headers=customer_headers).json()["data"]
    assert data["metrics"] == {"totalShipments": 3, "deliveredShipments": 1, "pendingShipments": 2}
    assert len(data["recentShipments"]) == 3


def test_customer_cannot_see_other_shipments(client, customer_headers, make_user, make_shipment):
    theirs = make_shipment(make_user())
    resp = client.get(f"/api/customer-dashboard/shipments/{theirs.id}", headers=customer_headers)
    assert resp.status_code == 404
    listed = client.get("/api/customer-dashboard/shipments", headers=customer_headers).json()["data"]
    assert listed["pagination"]["total"] == 0
