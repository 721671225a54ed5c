"""Admin dashboard overview"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import admin_only
from app.api.serializers import envelope
from app.models.base import get_db
from app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(admin_only)])


@router.get("/stats")
def dashboard_stats(db: Session = Depends(get_db)):
    return envelope(**DashboardService(db).get_stats())
