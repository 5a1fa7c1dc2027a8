# app/routers/order.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user
from app.models.enums import PaymentType
from app.models.user import User
from app.schemas.order import OrderCreate, OrderListResponse, OrderResponse
from app.services.order import OrderService

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=OrderResponse, status_code=201)
def create_order(
    order_in: OrderCreate,
    user_id: int = Query(..., description="Buyer the order is recorded for"),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Record an order manually (admin only).
    Orders are normally created by the payment webhook.
    """
    service = OrderService(db)
    return service.create_order(
        user_id=user_id,
        promo_id=order_in.promo_id,
        total=order_in.total,
        transaction_ref=order_in.transaction_ref,
        payment_type=order_in.payment_type,
        grand_total=order_in.grand_total,
    )


@router.get("/", response_model=OrderListResponse)
def list_orders(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    payment_type: Optional[PaymentType] = Query(None, description="Filter by payment type"),
    has_promo: Optional[bool] = Query(None, description="Only orders with (or without) a promo"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List orders. Admins see all, other users only their own.
    """
    service = OrderService(db)
    orders, pagination = service.fetch_orders(
        current_user, page=page, size=size, payment_type=payment_type, has_promo=has_promo
    )
    return {"orders": orders, **pagination}


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get an order by ID (owner or admin)."""
    service = OrderService(db)
    return service.fetch_order(order_id, current_user)
