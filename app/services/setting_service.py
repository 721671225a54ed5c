"""
Setting Service

Reads and updates the single company settings row.
"""
from typing import Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import ValidationError
from app.models.setting import Setting, SETTINGS_KEY
from app.utils.logger import log

SCALAR_FIELDS = ("company_name", "company_email", "company_phone", "address", "website", "logo")
# JSON groups that merge key-wise on update
NESTED_FIELDS = ("social_links", "notifications", "theme")


class SettingService:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self) -> Setting:
        """Return the settings row, inserting the defaults on first use."""
        setting = self.db.query(Setting).filter(Setting.key == SETTINGS_KEY).first()
        if setting:
            return setting

        self.db.add(Setting(key=SETTINGS_KEY))
        try:
            self.db.commit()
        except IntegrityError:
            # another request inserted it first
            self.db.rollback()
        setting = self.db.query(Setting).filter(Setting.key == SETTINGS_KEY).one()
        log.info("Initialised default company settings")
        return setting

    def update(self, changes: Dict) -> Setting:
        setting = self.get_or_create()

        for field in SCALAR_FIELDS:
            if changes.get(field) is not None:
                setattr(setting, field, changes[field])

        for field in NESTED_FIELDS:
            incoming = changes.get(field)
            if incoming is None:
                continue
            if not isinstance(incoming, dict):
                raise ValidationError(f"'{field}' must be an object")
            merged = dict(getattr(setting, field) or {})
            merged.update(incoming)
            # reassign so the JSON column is flagged dirty
            setattr(setting, field, merged)

        self.db.commit()
        self.db.refresh(setting)
        log.info("Company settings updated")
        return setting

    def set_logo(self, path: str) -> Setting:
        return self.update({"logo": path})
