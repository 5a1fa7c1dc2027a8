# app/services/academy.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.models.academy import Academy
from app.models.course import Course
from app.models.enums import Difficulty
from app.models.user import User
from app.schemas.academy import AcademyCreate, AcademyUpdate
from app.services.product import upsert_tags
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class AcademyService:
    """
    Academies bundle courses owned by the same instructor.

    When a ``gateway`` is supplied, subscribable academies are pushed to the
    payment provider's catalog after every create or update.
    """

    def __init__(self, db: Session, gateway=None):
        self.db = db
        self.gateway = gateway

    def _resolve_courses(self, course_ids: List[int], owner_id: int) -> Tuple[List[Course], List[int]]:
        """Split ids into courses owned by ``owner_id`` and ids that were not found."""
        found = []
        not_found = []
        for course_id in dict.fromkeys(course_ids):
            course = (
                self.db.query(Course)
                .filter(Course.id == course_id, Course.user_id == owner_id)
                .first()
            )
            if course:
                found.append(course)
            else:
                not_found.append(course_id)
        return found, not_found

    def _get_owned_academy(self, academy_id: int, user: User) -> Academy:
        academy = self.get_academy(academy_id)
        if not academy:
            raise NotFoundError("Academy not found")
        if academy.user_id != user.id and not user.is_admin:
            raise UnauthorizedError("User not permitted to modify this academy")
        return academy

    def _sync_with_gateway(self, academy: Academy) -> None:
        if self.gateway is not None and academy.is_subscribable:
            self.gateway.manage_product(academy)

    @db_exception
    def create_academy(self, academy_in: AcademyCreate, user_id: int) -> Tuple[Academy, List[int]]:
        data = academy_in.model_dump(exclude={"tags", "courses"})
        data["difficulty"] = Difficulty(data["difficulty"]).value

        if self.db.query(Academy.id).filter(Academy.name == data["name"]).first():
            raise ConflictError(f"Academy '{data['name']}' already exists")

        courses, not_found = self._resolve_courses(academy_in.courses, user_id)

        academy = Academy(**data, user_id=user_id)
        academy.courses = courses
        academy.tags = upsert_tags(self.db, academy_in.tags)
        academy.recompute_duration()

        self.db.add(academy)
        self.db.commit()
        self.db.refresh(academy)

        logger.info(
            f"Academy {academy.id} '{academy.name}' created by user {user_id} "
            f"with courses {[c.id for c in courses]}"
        )
        if not_found:
            logger.info(f"Academy {academy.id}: courses not found {not_found}")

        self._sync_with_gateway(academy)
        return academy, not_found

    @db_exception
    def update_academy(
        self, academy_id: int, academy_in: AcademyUpdate, user: User
    ) -> Tuple[Academy, List[int]]:
        academy = self._get_owned_academy(academy_id, user)

        data = academy_in.model_dump(exclude_unset=True, exclude={"tags", "courses"})
        if data.get("difficulty") is not None:
            data["difficulty"] = Difficulty(data["difficulty"]).value

        for field, value in data.items():
            setattr(academy, field, value)

        if academy_in.tags is not None:
            academy.tags = upsert_tags(self.db, academy_in.tags)

        not_found = []
        if academy_in.courses is not None:
            courses, not_found = self._resolve_courses(academy_in.courses, academy.user_id)
            academy.courses = courses

        academy.recompute_duration()
        self.db.commit()
        self.db.refresh(academy)

        self._sync_with_gateway(academy)
        return academy, not_found

    @db_exception
    def add_course(self, academy_id: int, course_id: int, user: User) -> Academy:
        academy = self._get_owned_academy(academy_id, user)

        courses, not_found = self._resolve_courses([course_id], academy.user_id)
        if not_found:
            raise NotFoundError("Course not found")

        course = courses[0]
        if course in academy.courses:
            raise ConflictError("Course already in academy")

        academy.courses.append(course)
        academy.recompute_duration()
        self.db.commit()
        self.db.refresh(academy)
        return academy

    @db_exception
    def remove_course(self, academy_id: int, course_id: int, user: User) -> Academy:
        academy = self._get_owned_academy(academy_id, user)

        course = next((c for c in academy.courses if c.id == course_id), None)
        if course is None:
            raise NotFoundError("Course is not part of this academy")

        academy.courses.remove(course)
        academy.recompute_duration()
        self.db.commit()
        self.db.refresh(academy)
        return academy

    def get_academy(self, academy_id: int) -> Optional[Academy]:
        return (
            self.db.query(Academy)
            .options(
                joinedload(Academy.instructor),
                joinedload(Academy.courses),
                joinedload(Academy.tags),
            )
            .filter(Academy.id == academy_id, Academy.deleted.is_(False))
            .first()
        )

    def get_academies(
        self,
        page: int = 1,
        size: int = None,
        search: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        instructor_id: Optional[int] = None,
        approved_only: bool = True,
    ) -> Tuple[List[Academy], dict]:
        query = (
            self.db.query(Academy)
            .options(joinedload(Academy.instructor))
            .filter(Academy.deleted.is_(False))
        )

        if approved_only:
            query = query.filter(Academy.approved.is_(True))

        if difficulty is not None:
            query = query.filter(Academy.difficulty == Difficulty(difficulty).value)

        if instructor_id is not None:
            query = query.filter(Academy.user_id == instructor_id)

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                (Academy.name.ilike(search_pattern))
                | (Academy.description.ilike(search_pattern))
            )

        return paginate(query.order_by(Academy.created_at.desc(), Academy.id.desc()), page, size)

    @db_exception
    def submit_academy(self, academy_id: int, user: User) -> str:
        academy = self._get_owned_academy(academy_id, user)
        if academy.submitted:
            return "Academy already submitted"
        academy.submitted = True
        self.db.commit()
        return "Academy submitted for review"

    @db_exception
    def approve_academy(self, academy_id: int) -> str:
        academy = self.get_academy(academy_id)
        if not academy:
            raise NotFoundError("Academy not found")
        if academy.approved:
            return "Academy already approved"
        academy.approved = True
        self.db.commit()
        logger.info(f"Academy {academy_id} approved")
        return "Academy approved"

    @db_exception
    def delete_academy(self, academy_id: int, user: User) -> str:
        academy = self._get_owned_academy(academy_id, user)
        academy.deleted = True
        self.db.commit()
        logger.info(f"Academy {academy_id} soft deleted by user {user.id}")
        return "Academy successfully deleted"
