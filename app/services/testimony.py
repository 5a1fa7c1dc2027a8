# app/services/testimony.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import NotFoundError, UnauthorizedError
from app.models.testimony import Testimony
from app.models.user import User
from app.schemas.common import SortOrder
from app.schemas.testimony import TestimonyCreate, TestimonyUpdate
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class TestimonyService:
    def __init__(self, db: Session):
        self.db = db

    def _get_testimony(self, testimony_id: int) -> Testimony:
        testimony = self.db.query(Testimony).filter(Testimony.id == testimony_id).first()
        if not testimony:
            raise NotFoundError("Testimony not found")
        return testimony

    @db_exception
    def create_testimony(self, testimony_in: TestimonyCreate, user: User) -> Testimony:
        testimony = Testimony(user_id=user.id, **testimony_in.model_dump())
        self.db.add(testimony)
        self.db.commit()
        self.db.refresh(testimony)
        logger.info(f"Testimony {testimony.id} created by user {user.id}")
        return testimony

    @db_exception
    def update_testimony(
        self, testimony_id: int, testimony_in: TestimonyUpdate, user: User
    ) -> Testimony:
        testimony = self._get_testimony(testimony_id)
        if not user.is_admin and testimony.user_id != user.id:
            raise UnauthorizedError("You are not permitted to update this Testimony")

        data = testimony_in.model_dump(exclude_unset=True, exclude_none=True)
        if not data:
            return testimony

        for field, value in data.items():
            setattr(testimony, field, value)
        self.db.commit()
        self.db.refresh(testimony)
        return testimony

    @db_exception
    def approve_testimony(self, testimony_id: int) -> str:
        testimony = self._get_testimony(testimony_id)
        if testimony.approved:
            return "Testimony already approved"

        testimony.approved = True
        self.db.commit()
        logger.info(f"Testimony {testimony_id} approved")
        return "Testimony has been approved"

    @db_exception
    def delete_testimony(self, testimony_id: int, user: User) -> str:
        """Owners may delete their own testimony until an admin approves it."""
        testimony = self._get_testimony(testimony_id)
        if not user.is_admin:
            if testimony.user_id != user.id:
                raise UnauthorizedError("You are not permitted to delete this Testimony")
            if testimony.approved:
                raise UnauthorizedError("Only an admin can delete an approved testimony")

        self.db.delete(testimony)
        self.db.commit()
        logger.info(f"Testimony {testimony_id} deleted by user {user.id}")
        return "Testimony has been successfully deleted"

    def fetch_user_testimonies(
        self, user: User, page: int = 1, size: int = None
    ) -> Tuple[List[Testimony], dict]:
        query = (
            self.db.query(Testimony)
            .options(joinedload(Testimony.user))
            .filter(Testimony.user_id == user.id)
            .order_by(Testimony.created_at.desc(), Testimony.id.desc())
        )
        return paginate(query, page, size)

    def fetch_testimonies(
        self,
        current_user: Optional[User],
        page: int = 1,
        size: int = None,
        search: Optional[str] = None,
        sort: SortOrder = SortOrder.NEWEST,
        approved: Optional[bool] = None,
    ) -> Tuple[List[Testimony], dict]:
        """Only admins see unapproved testimonies and may filter on approval."""
        query = self.db.query(Testimony).options(joinedload(Testimony.user))

        if current_user is None or not current_user.is_admin:
            query = query.filter(Testimony.approved.is_(True))
        elif approved is not None:
            query = query.filter(Testimony.approved.is_(approved))

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                (Testimony.statement.ilike(search_pattern))
                | (Testimony.profession.ilike(search_pattern))
            )

        if SortOrder(sort) == SortOrder.OLDEST:
            query = query.order_by(Testimony.created_at.asc(), Testimony.id.asc())
        else:
            query = query.order_by(Testimony.created_at.desc(), Testimony.id.desc())

        return paginate(query, page, size)
