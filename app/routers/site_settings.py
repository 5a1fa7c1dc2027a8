# app/routers/site_settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.models.user import User
from app.schemas.site_settings import (
    SiteSettingsCreate,
    SiteSettingsResponse,
    SiteSettingsUpdate,
)
from app.services.site_settings import SiteSettingsService

router = APIRouter(
    prefix="/settings",
    tags=["Site Settings"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=SiteSettingsResponse, status_code=201)
def create_settings(
    settings_in: SiteSettingsCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return SiteSettingsService(db).create_settings(settings_in)


@router.get("/", response_model=SiteSettingsResponse)
def get_current_settings(db: Session = Depends(get_db)):
    """Public storefront settings."""
    return SiteSettingsService(db).fetch_current()


@router.get("/{settings_id}", response_model=SiteSettingsResponse)
def get_settings(
    settings_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return SiteSettingsService(db).fetch_settings(settings_id)


@router.put("/{settings_id}", response_model=SiteSettingsResponse)
def update_settings(
    settings_id: int,
    settings_in: SiteSettingsUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return SiteSettingsService(db).update_settings(settings_id, settings_in)
