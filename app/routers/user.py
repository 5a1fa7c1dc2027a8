# app/routers/user.py

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user
from app.models.user import User
from app.schemas.auth import UpdateUserRoleRequest, UserProductsResponse, UserResponse
from app.schemas.subscription import SubscriptionListResponse
from app.services.auth import auth_service
from app.services.subscription import SubscriptionService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={404: {"description": "Not found"}},
)


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """
    Get current user's profile information.
    """
    return current_user


@router.get("/me/products", response_model=UserProductsResponse)
def list_my_products(current_user: User = Depends(get_current_user)):
    """Courses and academies the current user holds through completed payments."""
    return {
        "courses": current_user.subscribed_courses,
        "academies": current_user.subscribed_academies,
    }


@router.get("/me/subscriptions", response_model=SubscriptionListResponse)
def list_my_subscriptions(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List the current user's subscriptions, newest first.
    """
    service = SubscriptionService(db)
    subscriptions, pagination = service.fetch_user_subscriptions(
        current_user.id, page=page, size=size
    )
    return {"subscriptions": subscriptions, **pagination}


@router.get("/{user_id}", response_model=UserResponse)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Retrieve a single user by their ID (admin only).
    """
    db_user = db.query(User).filter(User.id == user_id).first()
    if db_user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return db_user


@router.put("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    request: UpdateUserRoleRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Assign a role to a user (admin only).
    """
    return auth_service.set_role(user_id, request.role, db)
