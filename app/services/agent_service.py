"""
Agent Service

Admin management of delivery agents (users with role ``agent``).
"""
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import NotFoundError
from app.models.lifecycle import delete_user
from app.models.shipment import Shipment, SHIPMENT_DELIVERED
from app.models.user import User, ROLE_AGENT, STATUS_ACTIVE, STATUS_IDLE, STATUS_INACTIVE
from app.services import auth_service
from app.services.customer_service import apply_profile_changes
from app.utils.pagination import PageParams, paginate, search_clause, is_filter_set


class AgentService:
    def __init__(self, db: Session):
        self.db = db

    def _agents(self):
        return self.db.query(User).filter(User.role == ROLE_AGENT)

    def list_agents(
        self,
        params: PageParams,
        search: Optional[str] = None,
        status: Optional[str] = None,
        region: Optional[str] = None,
    ) -> tuple[List[tuple], Dict]:
        """Page of agents with each one's delivered-shipment count."""
        query = self._agents()
        clause = search_clause(search, User.name, User.email, User.location)
        if clause is not None:
            query = query.filter(clause)
        if is_filter_set(status):
            query = query.filter(User.status == status)
        if is_filter_set(region):
            query = query.filter(User.location == region)
        query = query.order_by(User.created_at.desc(), User.id.desc())

        agents, pagination = paginate(query, params)
        deliveries = self._delivery_counts([a.id for a in agents])
        return [(a, deliveries.get(a.id, 0)) for a in agents], pagination

    def _delivery_counts(self, agent_ids: List[int]) -> Dict[int, int]:
        if not agent_ids:
            return {}
        rows = (
            self.db.query(Shipment.agent_id, func.count(Shipment.id))
            .filter(Shipment.agent_id.in_(agent_ids), Shipment.status == SHIPMENT_DELIVERED)
            .group_by(Shipment.agent_id)
            .all()
        )
        return dict(rows)

    def summary(self) -> Dict:
        return {
            "totalAgents": self._agents().count(),
            "activeOnDelivery": self._agents().filter(User.status == STATUS_ACTIVE).count(),
            "availableIdle": self._agents().filter(User.status == STATUS_IDLE).count(),
            "inactiveOffDuty": self._agents().filter(User.status == STATUS_INACTIVE).count(),
        }

    def all_names(self) -> List[Dict]:
        """Every agent's id and name, for assignment dropdowns."""
        return [
            {"id": agent_id, "name": name}
            for agent_id, name in self.db.query(User.id, User.name)
            .filter(User.role == ROLE_AGENT)
            .order_by(User.name)
            .all()
        ]

    def get(self, agent_id: int) -> User:
        agent = self._agents().filter(User.id == agent_id).first()
        if not agent:
            raise NotFoundError("No agent found with that ID")
        return agent

    def create(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
        location: Optional[str] = None,
    ) -> User:
        """New agents start Idle with the configured temporary password."""
        return auth_service.create_user(
            self.db,
            name,
            email,
            get_settings().agent_default_password,
            role=ROLE_AGENT,
            status=STATUS_IDLE,
            phone=phone,
            location=location,
        )

    def update(self, agent_id: int, changes: Dict) -> User:
        agent = self.get(agent_id)
        apply_profile_changes(self.db, agent, changes)
        self.db.commit()
        self.db.refresh(agent)
        return agent

    def delete(self, agent_id: int) -> None:
        delete_user(self.db, self.get(agent_id))
