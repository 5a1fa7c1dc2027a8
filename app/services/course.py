# app/services/course.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.models.course import Course
from app.models.enums import Difficulty
from app.models.subscription import Subscription
from app.models.user import User
from app.schemas.course import CourseCreate, CourseUpdate
from app.services.product import upsert_tags
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class CourseService:
    def __init__(self, db: Session):
        self.db = db

    def _get_owned_course(self, course_id: int, user: User) -> Course:
        course = self.get_course(course_id)
        if not course:
            raise NotFoundError("Course not found")
        if course.user_id != user.id and not user.is_admin:
            raise UnauthorizedError("User not permitted to modify this course")
        return course

    @db_exception
    def create_course(self, course_in: CourseCreate, user_id: int) -> Course:
        """Create a new course owned by the given instructor"""
        data = course_in.model_dump(exclude={"tags"})
        data["difficulty"] = Difficulty(data["difficulty"]).value

        course = Course(**data, user_id=user_id)
        course.tags = upsert_tags(self.db, course_in.tags)

        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)

        logger.info(f"Course {course.id} '{course.name}' created by user {user_id}")
        return course

    def get_course(self, course_id: int) -> Optional[Course]:
        """Get a course by ID"""
        return (
            self.db.query(Course)
            .options(joinedload(Course.instructor), joinedload(Course.tags))
            .filter(Course.id == course_id)
            .first()
        )

    def get_courses(
        self,
        page: int = 1,
        size: int = None,
        search: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        instructor_id: Optional[int] = None,
        approved_only: bool = True,
    ) -> Tuple[List[Course], dict]:
        """Get list of courses with pagination and filters"""
        query = self.db.query(Course).options(joinedload(Course.instructor))

        if approved_only:
            query = query.filter(Course.approved.is_(True))

        if difficulty is not None:
            query = query.filter(Course.difficulty == Difficulty(difficulty).value)

        if instructor_id is not None:
            query = query.filter(Course.user_id == instructor_id)

        # Search by name or description
        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                (Course.name.ilike(search_pattern))
                | (Course.description.ilike(search_pattern))
            )

        return paginate(query.order_by(Course.created_at.desc(), Course.id.desc()), page, size)

    @db_exception
    def update_course(self, course_id: int, course_in: CourseUpdate, user: User) -> Course:
        """Update a course; academies containing it track its new duration"""
        course = self._get_owned_course(course_id, user)

        data = course_in.model_dump(exclude_unset=True, exclude={"tags"})
        if data.get("difficulty") is not None:
            data["difficulty"] = Difficulty(data["difficulty"]).value

        for field, value in data.items():
            setattr(course, field, value)

        if course_in.tags is not None:
            course.tags = upsert_tags(self.db, course_in.tags)

        if "duration" in data:
            for academy in course.academies:
                academy.recompute_duration()

        self.db.commit()
        self.db.refresh(course)
        return course

    @db_exception
    def delete_course(self, course_id: int, user: User) -> str:
        """Delete a course and detach it from every academy"""
        course = self._get_owned_course(course_id, user)

        has_subscriptions = (
            self.db.query(Subscription.id)
            .filter(Subscription.course_id == course.id)
            .first()
        )
        if has_subscriptions:
            raise ConflictError("Course has subscriptions and cannot be deleted")

        academies = list(course.academies)
        for academy in academies:
            academy.courses.remove(course)
            academy.recompute_duration()

        self.db.delete(course)
        self.db.commit()

        logger.info(
            f"Course {course_id} deleted by user {user.id}, "
            f"detached from academies {[a.id for a in academies]}"
        )
        return "Course successfully deleted"

    @db_exception
    def submit_course(self, course_id: int, user: User) -> str:
        course = self._get_owned_course(course_id, user)
        if course.submitted:
            return "Course already submitted"
        course.submitted = True
        self.db.commit()
        return "Course submitted for review"

    @db_exception
    def approve_course(self, course_id: int) -> str:
        course = self.get_course(course_id)
        if not course:
            raise NotFoundError("Course not found")
        if course.approved:
            return "Course already approved"
        course.approved = True
        self.db.commit()
        logger.info(f"Course {course_id} approved")
        return "Course approved"
