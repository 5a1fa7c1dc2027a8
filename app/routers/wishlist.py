# app/routers/wishlist.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.enums import ProductType
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.wishlist import WishlistCreate, WishlistListResponse, WishlistResponse
from app.services.wishlist import WishlistService

router = APIRouter(
    prefix="/wishlists",
    tags=["Wishlists"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=WishlistResponse, status_code=201)
def create_wishlist(
    wishlist_in: WishlistCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = WishlistService(db)
    return service.create_wishlist(current_user, wishlist_in.product)


@router.get("/", response_model=WishlistListResponse)
def list_wishlists(
    product_type: Optional[ProductType] = Query(None, description="Filter by product type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = WishlistService(db)
    return {"wishlists": service.fetch_wishlists(current_user, product_type)}


@router.delete("/{wishlist_id}", response_model=MessageResponse)
def delete_wishlist(
    wishlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = WishlistService(db)
    return {"message": service.delete_wishlist(wishlist_id, current_user)}
