# app/routers/testimony.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user, get_optional_user
from app.models.user import User
from app.schemas.common import MessageResponse, SortOrder
from app.schemas.testimony import (
    TestimonyCreate,
    TestimonyListResponse,
    TestimonyResponse,
    TestimonyUpdate,
)
from app.services.testimony import TestimonyService

router = APIRouter(
    prefix="/testimonies",
    tags=["Testimonies"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=TestimonyResponse, status_code=201)
def create_testimony(
    testimony_in: TestimonyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Submit a testimony; it is published once an admin approves it."""
    return TestimonyService(db).create_testimony(testimony_in, current_user)


@router.get("/", response_model=TestimonyListResponse)
def list_testimonies(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search statement or profession"),
    sort: SortOrder = Query(SortOrder.NEWEST),
    approved: Optional[bool] = Query(None, description="Admin only"),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    testimonies, pagination = TestimonyService(db).fetch_testimonies(
        current_user, page=page, size=size, search=search, sort=sort, approved=approved
    )
    return {"testimonies": testimonies, **pagination}


@router.get("/me", response_model=TestimonyListResponse)
def list_my_testimonies(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    testimonies, pagination = TestimonyService(db).fetch_user_testimonies(
        current_user, page=page, size=size
    )
    return {"testimonies": testimonies, **pagination}


@router.put("/{testimony_id}", response_model=TestimonyResponse)
def update_testimony(
    testimony_id: int,
    testimony_in: TestimonyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return TestimonyService(db).update_testimony(testimony_id, testimony_in, current_user)


@router.put("/{testimony_id}/approve", response_model=MessageResponse)
def approve_testimony(
    testimony_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return {"message": TestimonyService(db).approve_testimony(testimony_id)}


@router.delete("/{testimony_id}", response_model=MessageResponse)
def delete_testimony(
    testimony_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"message": TestimonyService(db).delete_testimony(testimony_id, current_user)}
