"""Agents API (admin)"""
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.deps import admin_only, page_params
from app.api.schemas import ApiModel
from app.api.serializers import envelope, user_out
from app.models.base import get_db
from app.services.agent_service import AgentService
from app.utils.pagination import PageParams

router = APIRouter(prefix="/agents", tags=["agents"], dependencies=[Depends(admin_only)])


class AgentCreate(ApiModel):
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None


class AgentUpdate(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None


@router.get("/summary")
def agent_summary(db: Session = Depends(get_db)):
    return envelope(**AgentService(db).summary())


@router.get("/list")
def agent_list(db: Session = Depends(get_db)):
    """Id and name of every agent."""
    return envelope(agents=AgentService(db).all_names())


@router.get("")
def list_agents(
    search: Optional[str] = None,
    status: Optional[str] = None,
    region: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    rows, pagination = AgentService(db).list_agents(params, search, status, region)
    agents = [{**user_out(a), "totalDeliveries": count} for a, count in rows]
    return envelope(agents=agents, pagination=pagination)


@router.post("", status_code=201)
def create_agent(body: AgentCreate, db: Session = Depends(get_db)):
    agent = AgentService(db).create(body.name, body.email, phone=body.phone, location=body.location)
    return envelope(agent=user_out(agent))


@router.put("/{agent_id}")
def update_agent(agent_id: int, body: AgentUpdate, db: Session = Depends(get_db)):
    agent = AgentService(db).update(agent_id, body.changes())
    return envelope(agent=user_out(agent))


@router.delete("/{agent_id}", status_code=204)
def delete_agent(agent_id: int, db: Session = Depends(get_db)):
    AgentService(db).delete(agent_id)
    return Response(status_code=204)
