# app/routers/promo.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_instructor
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.promo import PromoCreate, PromoListResponse, PromoResponse
from app.services.promo import PromoService

router = APIRouter(
    prefix="/promos",
    tags=["Promos"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=PromoResponse, status_code=201)
def create_promo(
    promo_in: PromoCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Create a promo code.
    Admin promos apply site wide and are active at once; instructor promos
    are capped and need admin validation.
    """
    service = PromoService(db)
    return service.create_promo(promo_in.percentage, promo_in.code, current_user.id)


@router.get("/", response_model=PromoListResponse)
def list_promos(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    validated: Optional[bool] = Query(None, description="Filter by validation status"),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """List promo codes (admin only)."""
    service = PromoService(db)
    promos, pagination = service.fetch_promos(page=page, size=size, validated=validated)
    return {"promos": promos, **pagination}


@router.post("/{promo_id}/validate", response_model=MessageResponse)
def validate_promo(
    promo_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    service = PromoService(db)
    return {"message": service.validate_promo(promo_id)}


@router.post("/{promo_id}/invalidate", response_model=MessageResponse)
def invalidate_promo(
    promo_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    service = PromoService(db)
    return {"message": service.invalidate_promo(promo_id)}
