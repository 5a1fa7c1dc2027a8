# app/routers/lesson.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_instructor
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.lesson import (
    LessonCreate,
    LessonListResponse,
    LessonResponse,
    LessonUpdate,
)
from app.services.lesson import LessonService

router = APIRouter(
    prefix="/lessons",
    tags=["Lessons"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=LessonResponse, status_code=201)
def create_lesson(
    lesson_in: LessonCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Add a lesson to a course you own.
    The course (and every academy holding it) grows by the lesson's duration.
    """
    return LessonService(db).create_lesson(lesson_in, current_user)


@router.get("/", response_model=LessonListResponse)
def list_lessons(
    course_id: Optional[int] = Query(None, description="Filter by course"),
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    lessons, pagination = LessonService(db).fetch_lessons(course_id, page=page, size=size)
    return {"lessons": lessons, **pagination}


@router.get("/{lesson_id}", response_model=LessonResponse)
def get_lesson(lesson_id: int, db: Session = Depends(get_db)):
    lesson = LessonService(db).get_lesson(lesson_id)
    if not lesson:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lesson not found",
        )
    return lesson


@router.put("/{lesson_id}", response_model=LessonResponse)
def update_lesson(
    lesson_id: int,
    lesson_in: LessonUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    return LessonService(db).update_lesson(lesson_id, lesson_in, current_user)


@router.delete("/{lesson_id}", response_model=MessageResponse)
def delete_lesson(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    return {"message": LessonService(db).delete_lesson(lesson_id, current_user)}
