# app/routers/subscription.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.enums import ProductType, SubscriptionStatus
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionListResponse,
    SubscriptionResponse,
)
from app.services.subscription import SubscriptionService

router = APIRouter(
    prefix="/subscriptions",
    tags=["Subscriptions"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=List[SubscriptionResponse], status_code=201)
def create_subscriptions(
    subscription_in: SubscriptionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create one Pending subscription per product for the current user.
    Fails as a whole if any product does not exist.
    """
    service = SubscriptionService(db)
    return service.create_subscriptions(
        current_user.id,
        subscription_in.payment_frequency,
        subscription_in.products,
        order_id=subscription_in.order_id,
    )


@router.get("/", response_model=SubscriptionListResponse)
def list_subscriptions(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    status: Optional[SubscriptionStatus] = Query(None, description="Filter by status"),
    product_type: Optional[ProductType] = Query(None, description="Filter by product type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List subscriptions. Admins see all, other users only their own.
    """
    service = SubscriptionService(db)
    subscriptions, pagination = service.fetch_subscriptions(
        current_user, page=page, size=size, status=status, product_type=product_type
    )
    return {"subscriptions": subscriptions, **pagination}


@router.delete("/{subscription_id}", response_model=MessageResponse)
def delete_subscription(
    subscription_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Delete one of your Pending subscriptions. Completed subscriptions are kept.
    """
    service = SubscriptionService(db)
    return {"message": service.delete_subscription(subscription_id, current_user.id)}
