# app/services/promo.py
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.decorator import db_exception
from app.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from app.models.enums import PromoType, UserRole
from app.models.promo import Promo
from app.models.user import User
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def compute_grand_total(total, percentage) -> Decimal:
    """Apply a percentage discount: total × (1 − percentage/100), rounded to cents."""
    total = Decimal(str(total))
    discount = Decimal(str(percentage or 0)) / Decimal(100)
    return (total * (Decimal(1) - discount)).quantize(CENTS, rounding=ROUND_HALF_UP)


class PromoService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception
    def create_promo(self, percentage: float, code: str, user_id: int) -> Promo:
        """
        Create a promo code.

        Admin promos are site wide and active immediately. Instructor promos are
        capped by ``max_instructor_promo_percentage`` and wait for an admin to
        validate them.
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")

        if user.role == UserRole.ADMIN.value:
            promo_type = PromoType.SITE_WIDE
            validated = True
        elif user.role == UserRole.INSTRUCTOR.value:
            if percentage > settings.max_instructor_promo_percentage:
                raise InvalidInputError(
                    f"Instructors may not create promos above "
                    f"{settings.max_instructor_promo_percentage}%"
                )
            promo_type = PromoType.INSTRUCTOR
            validated = False
        else:
            raise UnauthorizedError("User is not permitted to create promos")

        normalized_code = code.strip().upper()
        if self.db.query(Promo).filter(Promo.code == normalized_code).first():
            raise ConflictError(f"Promo code '{normalized_code}' already exists")

        promo = Promo(
            code=normalized_code,
            percentage=Decimal(str(percentage)),
            promo_type=promo_type.value,
            validated=validated,
            user_id=user.id,
        )
        self.db.add(promo)
        self.db.commit()
        self.db.refresh(promo)

        logger.info(
            f"Promo {promo.code} ({promo.percentage}%) created by user {user.id}"
        )
        return promo

    def get_promo(self, promo_id: int) -> Optional[Promo]:
        return self.db.query(Promo).filter(Promo.id == promo_id).first()

    def get_usable_percentage(self, promo_id: Optional[int]) -> Decimal:
        """Discount percentage a promo grants at checkout; 0 unless validated."""
        if promo_id is None:
            return Decimal(0)
        promo = self.get_promo(promo_id)
        if promo is None:
            raise NotFoundError("Promo not found")
        if not promo.validated:
            logger.info(f"Promo {promo.code} is not validated, ignoring discount")
            return Decimal(0)
        return Decimal(str(promo.percentage))

    def fetch_promos(
        self, page: int = 1, size: int = None, validated: Optional[bool] = None
    ) -> Tuple[List[Promo], dict]:
        query = self.db.query(Promo).options(joinedload(Promo.creator))
        if validated is not None:
            query = query.filter(Promo.validated == validated)
        return paginate(query.order_by(Promo.created_at.desc(), Promo.id.desc()), page, size)

    @db_exception
    def validate_promo(self, promo_id: int) -> str:
        promo = self.get_promo(promo_id)
        if not promo:
            raise NotFoundError("Promo not found")

        if promo.validated:
            return "Promo already validated"

        promo.validated = True
        self.db.commit()
        logger.info(f"Promo {promo.code} validated")
        return "Promo has been validated"

    @db_exception
    def invalidate_promo(self, promo_id: int) -> str:
        promo = self.get_promo(promo_id)
        if not promo:
            raise NotFoundError("Promo not found")

        if not promo.validated:
            return "Promo is already invalid"

        promo.validated = False
        self.db.commit()
        logger.info(f"Promo {promo.code} invalidated")
        return "Promo has been invalidated"
