# app/routers/academy.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import (
    get_current_admin,
    get_current_instructor,
    get_optional_user,
    get_payment_gateway,
)
from app.models.enums import Difficulty
from app.models.user import User
from app.schemas.academy import (
    AcademyCreate,
    AcademyListResponse,
    AcademyResponse,
    AcademyUpdate,
    AcademyWriteResponse,
)
from app.schemas.common import MessageResponse
from app.services.academy import AcademyService
from app.services.payment_gateway import PaymentGatewayService

router = APIRouter(
    prefix="/academies",
    tags=["Academies"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=AcademyWriteResponse, status_code=201)
def create_academy(
    academy_in: AcademyCreate,
    db: Session = Depends(get_db),
    gateway: PaymentGatewayService = Depends(get_payment_gateway),
    current_user: User = Depends(get_current_instructor),
):
    """
    Create an academy from the instructor's own courses.
    Course ids that do not belong to the instructor are reported in
    ``courses_not_found``. Subscribable academies are published to Stripe.
    """
    service = AcademyService(db, gateway)
    academy, not_found = service.create_academy(academy_in, current_user.id)
    return {"academy": academy, "courses_not_found": not_found}


@router.get("/", response_model=AcademyListResponse)
def list_academies(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name or description"),
    difficulty: Optional[Difficulty] = Query(None, description="Filter by difficulty"),
    instructor_id: Optional[int] = Query(None, description="Filter by instructor"),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get list of academies with pagination and filters.
    """
    service = AcademyService(db)
    academies, pagination = service.get_academies(
        page=page,
        size=size,
        search=search,
        difficulty=difficulty,
        instructor_id=instructor_id,
        approved_only=not (current_user and current_user.is_admin),
    )
    return {"academies": academies, **pagination}


@router.get("/{academy_id}", response_model=AcademyResponse)
def get_academy(academy_id: int, db: Session = Depends(get_db)):
    """Get an academy by ID."""
    service = AcademyService(db)
    academy = service.get_academy(academy_id)
    if not academy:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Academy not found",
        )
    return academy


@router.put("/{academy_id}", response_model=AcademyWriteResponse)
def update_academy(
    academy_id: int,
    academy_in: AcademyUpdate,
    db: Session = Depends(get_db),
    gateway: PaymentGatewayService = Depends(get_payment_gateway),
    current_user: User = Depends(get_current_instructor),
):
    """
    Update an academy. A ``courses`` list replaces the current courses.
    """
    service = AcademyService(db, gateway)
    academy, not_found = service.update_academy(academy_id, academy_in, current_user)
    return {"academy": academy, "courses_not_found": not_found}


@router.post("/{academy_id}/courses/{course_id}", response_model=AcademyResponse)
def add_course_to_academy(
    academy_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """Add one of the instructor's courses to an academy."""
    service = AcademyService(db)
    return service.add_course(academy_id, course_id, current_user)


@router.delete("/{academy_id}/courses/{course_id}", response_model=AcademyResponse)
def remove_course_from_academy(
    academy_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """Remove a course from an academy."""
    service = AcademyService(db)
    return service.remove_course(academy_id, course_id, current_user)


@router.post("/{academy_id}/submit", response_model=MessageResponse)
def submit_academy(
    academy_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """Submit an academy for admin review."""
    service = AcademyService(db)
    return {"message": service.submit_academy(academy_id, current_user)}


@router.post("/{academy_id}/approve", response_model=MessageResponse)
def approve_academy(
    academy_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Approve an academy (admin only)."""
    service = AcademyService(db)
    return {"message": service.approve_academy(academy_id)}


@router.delete("/{academy_id}", response_model=MessageResponse)
def delete_academy(
    academy_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """Soft delete an academy."""
    service = AcademyService(db)
    return {"message": service.delete_academy(academy_id, current_user)}
