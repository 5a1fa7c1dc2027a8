# app/services/site_settings.py
import logging

from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.site_settings import SiteSettings
from app.schemas.site_settings import SiteSettingsCreate, SiteSettingsUpdate

logger = logging.getLogger(__name__)


class SiteSettingsService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def create_settings(self, settings_in: SiteSettingsCreate) -> SiteSettings:
        settings = SiteSettings(**settings_in.model_dump())
        self.db.add(settings)
        self.db.commit()
        self.db.refresh(settings)
        logger.info(f"Site settings {settings.id} created")
        return settings

    @db_exception
    def update_settings(self, settings_id: int, settings_in: SiteSettingsUpdate) -> SiteSettings:
        data = settings_in.model_dump(exclude_unset=True)
        if not data:
            raise InvalidInputError("Missing update data")

        settings = self.fetch_settings(settings_id)
        for field, value in data.items():
            setattr(settings, field, value)

        self.db.commit()
        self.db.refresh(settings)
        return settings

    def fetch_settings(self, settings_id: int) -> SiteSettings:
        settings = self.db.query(SiteSettings).filter(SiteSettings.id == settings_id).first()
        if not settings:
            raise NotFoundError("Site settings not found")
        return settings

    def fetch_current(self) -> SiteSettings:
        settings = self.db.query(SiteSettings).order_by(SiteSettings.id).first()
        if not settings:
            raise NotFoundError("Site settings not found")
        return settings
