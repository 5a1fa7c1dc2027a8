# app/services/lesson.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.core.exceptions import NotFoundError, UnauthorizedError
from app.models.course import Course
from app.models.lesson import Lesson
from app.models.user import User
from app.schemas.lesson import LessonCreate, LessonUpdate
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class LessonService:
    def __init__(self, db: Session):
        self.db = db

    def _get_owned_course(self, course_id: int, user: User) -> Course:
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise NotFoundError("Course not found")
        if course.user_id != user.id and not user.is_admin:
            raise UnauthorizedError("User must be the course instructor to manage its lessons")
        return course

    def _get_owned_lesson(self, lesson_id: int, user: User) -> Lesson:
        lesson = self.get_lesson(lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found")
        self._get_owned_course(lesson.course_id, user)
        return lesson

    @staticmethod
    def _move_course_duration(course: Course, delta: int) -> None:
        """Shift the course duration and keep every academy holding it in step."""
        if not delta:
            return
        course.duration = max((course.duration or 0) + delta, 0)
        for academy in course.academies:
            academy.recompute_duration()

    @db_exception
    def create_lesson(self, lesson_in: LessonCreate, user: User) -> Lesson:
        course = self._get_owned_course(lesson_in.course_id, user)

        position = lesson_in.position
        if position is None:
            last = (
                self.db.query(func.max(Lesson.position))
                .filter(Lesson.course_id == course.id)
                .scalar()
            )
            position = (last or 0) + 1

        lesson = Lesson(**lesson_in.model_dump(exclude={"position"}), position=position)
        self.db.add(lesson)
        self._move_course_duration(course, lesson.duration)

        self.db.commit()
        self.db.refresh(lesson)

        logger.info(f"Lesson {lesson.id} added to course {course.id} at position {position}")
        return lesson

    def get_lesson(self, lesson_id: int) -> Optional[Lesson]:
        return self.db.query(Lesson).filter(Lesson.id == lesson_id).first()

    def fetch_lessons(
        self, course_id: Optional[int] = None, page: int = 1, size: int = None
    ) -> Tuple[List[Lesson], dict]:
        query = self.db.query(Lesson)
        if course_id is not None:
            query = query.filter(Lesson.course_id == course_id)
        return paginate(query.order_by(Lesson.course_id, Lesson.position), page, size)

    @db_exception
    def update_lesson(self, lesson_id: int, lesson_in: LessonUpdate, user: User) -> Lesson:
        lesson = self._get_owned_lesson(lesson_id, user)

        data = lesson_in.model_dump(exclude_unset=True, exclude_none=True)
        if "duration" in data:
            self._move_course_duration(lesson.course, data["duration"] - lesson.duration)

        for field, value in data.items():
            setattr(lesson, field, value)

        self.db.commit()
        self.db.refresh(lesson)
        return lesson

    @db_exception
    def delete_lesson(self, lesson_id: int, user: User) -> str:
        lesson = self._get_owned_lesson(lesson_id, user)

        self._move_course_duration(lesson.course, -lesson.duration)
        self.db.delete(lesson)
        self.db.commit()

        logger.info(f"Lesson {lesson_id} deleted by user {user.id}")
        return "Lesson successfully deleted"
