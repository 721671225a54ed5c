"""
Dashboard Service

Aggregates the admin overview: headline metrics, six-month charts,
status distribution, top agents and a short recent-activity feed.

Every figure is its own query under the session's default isolation
(read committed), so a write landing mid-request can make two figures
disagree slightly. That is acceptable for an overview screen.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.models.payment import Payment, PAYMENT_COMPLETED
from app.models.shipment import Shipment, SHIPMENT_STATUSES, SHIPMENT_DELIVERED
from app.models.user import User, ROLE_CUSTOMER, ROLE_AGENT
from app.services.aggregates import group_by_month, scalar_sum
from app.utils.helpers import isoformat, month_label, safe_divide, trailing_months
from app.utils.logger import log

CHART_MONTHS = 6
TOP_AGENTS = 5
RECENT_SHIPMENTS = 3
RECENT_CUSTOMERS = 2
RECENT_ACTIVITIES = 4


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def get_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.utcnow()
        window = trailing_months(CHART_MONTHS, now)
        since = datetime(window[0][0], window[0][1], 1)

        stats = {
            "metrics": self._metrics(),
            "charts": {
                "shipmentData": self._shipments_by_month(window, since),
                "revenueData": self._revenue_by_month(window, since),
                "customerGrowthData": self._customers_by_month(window, since),
                "statusDistribution": self._status_distribution(),
                "topAgents": self._top_agents(),
            },
            "recentActivities": self._recent_activities(),
        }
        log.debug("Dashboard stats computed")
        return stats

    def _metrics(self) -> Dict[str, Any]:
        total_shipments = self.db.query(Shipment).count()
        delivered = self.db.query(Shipment).filter(Shipment.status == SHIPMENT_DELIVERED).count()
        return {
            "totalShipments": total_shipments,
            "totalCustomers": self.db.query(User).filter(User.role == ROLE_CUSTOMER).count(),
            "totalRevenue": scalar_sum(self.db, Payment.amount, Payment.status == PAYMENT_COMPLETED),
            "deliverySuccessRate": round(safe_divide(delivered, total_shipments) * 100, 1),
        }

    def _shipments_by_month(self, window, since) -> List[Dict]:
        per_status = {
            status: group_by_month(
                self.db,
                Shipment.created_at,
                func.count(Shipment.id),
                Shipment.status == status,
                since=since,
            )
            for status in SHIPMENT_STATUSES
        }
        rows = []
        for y, m in window:
            row = {"name": month_label(y, m)}
            for status in SHIPMENT_STATUSES:
                row[status] = int(per_status[status].get((y, m), 0))
            rows.append(row)
        return rows

    def _revenue_by_month(self, window, since) -> List[Dict]:
        revenue = group_by_month(
            self.db,
            Payment.transaction_date,
            func.sum(Payment.amount),
            Payment.status == PAYMENT_COMPLETED,
            since=since,
        )
        return [
            {"name": month_label(y, m), "revenue": float(revenue.get((y, m), 0) or 0)}
            for y, m in window
        ]

    def _customers_by_month(self, window, since) -> List[Dict]:
        joined = group_by_month(
            self.db,
            User.created_at,
            func.count(User.id),
            User.role == ROLE_CUSTOMER,
            since=since,
        )
        return [
            {"name": month_label(y, m), "customers": int(joined.get((y, m), 0))}
            for y, m in window
        ]

    def _status_distribution(self) -> List[Dict]:
        rows = (
            self.db.query(Shipment.status, func.count(Shipment.id))
            .group_by(Shipment.status)
            .all()
        )
        return [{"name": status, "value": count} for status, count in rows]

    def _top_agents(self) -> List[Dict]:
        deliveries = func.count(Shipment.id)
        rows = (
            self.db.query(User.name, deliveries)
            .join(Shipment, Shipment.agent_id == User.id)
            .filter(User.role == ROLE_AGENT, Shipment.status == SHIPMENT_DELIVERED)
            .group_by(User.id, User.name)
            .order_by(deliveries.desc(), User.name)
            .limit(TOP_AGENTS)
            .all()
        )
        return [{"name": name, "deliveries": count} for name, count in rows]

    def _recent_activities(self) -> List[Dict]:
        shipments = (
            self.db.query(Shipment)
            .options(joinedload(Shipment.customer))
            .order_by(Shipment.created_at.desc(), Shipment.id.desc())
            .limit(RECENT_SHIPMENTS)
            .all()
        )
        customers = (
            self.db.query(User)
            .filter(User.role == ROLE_CUSTOMER)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(RECENT_CUSTOMERS)
            .all()
        )

        activities = [
            {
                "id": f"shipment-{s.id}",
                "type": "shipment",
                "text": f"New shipment {s.shipment_id} created for {s.customer.name if s.customer else 'a customer'}.",
                "timestamp": s.created_at,
            }
            for s in shipments
        ] + [
            {"id": f"customer-{c.id}", "type": "customer", "text": f"New customer registered: {c.name}.", "timestamp": c.created_at}
            for c in customers
        ]
        activities.sort(key=lambda a: a["timestamp"] or datetime.min, reverse=True)
        return [
            {**a, "timestamp": isoformat(a["timestamp"])}
            for a in activities[:RECENT_ACTIVITIES]
        ]
