# app/routers/course.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import (
    get_current_admin,
    get_current_instructor,
    get_optional_user,
)
from app.models.enums import Difficulty
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.course import (
    CourseCreate,
    CourseListResponse,
    CourseResponse,
    CourseUpdate,
)
from app.services.course import CourseService

router = APIRouter(
    prefix="/courses",
    tags=["Courses"],
    responses={404: {"description": "Not found"}},
)


# ==================== Course Endpoints ====================


@router.post("/", response_model=CourseResponse, status_code=201)
def create_course(
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Create a new course.
    Only instructors and admins can create courses.
    """
    service = CourseService(db)
    return service.create_course(course_in, current_user.id)


@router.get("/", response_model=CourseListResponse)
def list_courses(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name or description"),
    difficulty: Optional[Difficulty] = Query(None, description="Filter by difficulty"),
    instructor_id: Optional[int] = Query(None, description="Filter by instructor"),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get list of courses with pagination and filters.
    Only admins see courses that are not approved yet.
    """
    service = CourseService(db)
    courses, pagination = service.get_courses(
        page=page,
        size=size,
        search=search,
        difficulty=difficulty,
        instructor_id=instructor_id,
        approved_only=not (current_user and current_user.is_admin),
    )
    return {"courses": courses, **pagination}


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: int,
    db: Session = Depends(get_db),
):
    """
    Get a course by ID.
    Available to all users (authenticated or not).
    """
    service = CourseService(db)
    course = service.get_course(course_id)

    if not course:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Course not found",
        )

    return course


@router.put("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: int,
    course_in: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Update a course.
    Only the owning instructor (or an admin) can update it.
    """
    service = CourseService(db)
    return service.update_course(course_id, course_in, current_user)


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Delete a course and detach it from its academies.
    """
    service = CourseService(db)
    return {"message": service.delete_course(course_id, current_user)}


@router.post("/{course_id}/submit", response_model=MessageResponse)
def submit_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """Submit a course for admin review."""
    service = CourseService(db)
    return {"message": service.submit_course(course_id, current_user)}


@router.post("/{course_id}/approve", response_model=MessageResponse)
def approve_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Approve a course (admin only)."""
    service = CourseService(db)
    return {"message": service.approve_course(course_id)}
