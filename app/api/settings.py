"""Company settings API (admin)"""
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import admin_only
from app.api.schemas import ApiModel
from app.api.serializers import envelope, setting_out
from app.models.base import get_db
from app.services.setting_service import SettingService

router = APIRouter(prefix="/settings", tags=["settings"], dependencies=[Depends(admin_only)])


class SettingsUpdate(ApiModel):
    company_name: Optional[str] = None
    company_email: Optional[str] = None
    company_phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    # Nested groups keep their camelCase keys as stored
    social_links: Optional[Dict] = None
    notifications: Optional[Dict] = None
    theme: Optional[Dict] = None


@router.get("")
def get_settings_row(db: Session = Depends(get_db)):
    return envelope(settings=setting_out(SettingService(db).get_or_create()))


@router.put("")
def update_settings(body: SettingsUpdate, db: Session = Depends(get_db)):
    setting = SettingService(db).update(body.changes())
    return envelope(settings=setting_out(setting))
