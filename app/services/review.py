# app/services/review.py
import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import NotFoundError, UnauthorizedError
from app.models.academy import Academy
from app.models.enums import ProductType
from app.models.review import Review
from app.models.user import User
from app.schemas.common import ProductRef
from app.services.product import Product, find_product, get_product
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _holds_product(user: User, product: Product) -> bool:
        if isinstance(product, Academy):
            return product in user.subscribed_academies
        return product in user.subscribed_courses

    def _product_filter(self, query, product_type: ProductType, product_id: int):
        if ProductType(product_type) == ProductType.ACADEMY:
            return query.filter(Review.academy_id == product_id)
        return query.filter(Review.course_id == product_id)

    def _get_review_for_instructor(self, review_id: int, user: User) -> Review:
        review = self.db.query(Review).filter(Review.id == review_id).first()
        if not review or review.deleted:
            raise NotFoundError("Review not found")

        product = review.product
        if not user.is_admin and (product is None or product.user_id != user.id):
            raise UnauthorizedError("Only the product instructor can moderate this review")
        return review

    @db_exception
    def create_review(
        self, user: User, product_ref: ProductRef, star_rating: int, comment: str
    ) -> Tuple[Review, bool]:
        """
        Create a review for a product the user holds.

        Returns ``(review, created)``; a second review of the same product
        returns the existing one.
        """
        product = get_product(self.db, product_ref.product_type, product_ref.product_id)

        if not self._holds_product(user, product):
            raise UnauthorizedError("You can only review products you are subscribed to")

        existing = self._product_filter(
            self.db.query(Review).filter(Review.user_id == user.id, Review.deleted.is_(False)),
            product_ref.product_type,
            product_ref.product_id,
        ).first()
        if existing:
            return existing, False

        review = Review(
            user_id=user.id,
            star_rating=star_rating,
            comment=comment,
        )
        review.set_product(product)
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)

        logger.info(f"Review {review.id} created by user {user.id} on {review.product_type} {review.product_id}")
        return review, True

    def _recompute_rating(self, product: Optional[Product]) -> None:
        if product is None:
            return
        query = self.db.query(
            func.avg(Review.star_rating), func.count(Review.id)
        ).filter(Review.approved.is_(True), Review.deleted.is_(False))
        if isinstance(product, Academy):
            query = query.filter(Review.academy_id == product.id)
        else:
            query = query.filter(Review.course_id == product.id)

        average, count = query.one()
        product.rating = math.ceil(float(average)) if average is not None else None
        product.reviews_count = count

    @db_exception
    def approve_review(self, review_id: int, user: User) -> str:
        review = self._get_review_for_instructor(review_id, user)
        if review.approved:
            return "Review already approved"

        review.approved = True
        self.db.flush()
        self._recompute_rating(review.product)
        self.db.commit()
        return "Review approved"

    @db_exception
    def delete_review(self, review_id: int, user: User) -> str:
        review = self._get_review_for_instructor(review_id, user)
        review.deleted = True
        self.db.flush()
        self._recompute_rating(review.product)
        self.db.commit()
        return "Review successfully deleted"

    def fetch_product_reviews(
        self,
        product_type: ProductType,
        product_id: int,
        page: int = 1,
        size: int = None,
    ) -> Tuple[List[Review], dict]:
        if find_product(self.db, product_type, product_id) is None:
            raise NotFoundError(f"{ProductType(product_type).value} not found")

        query = self._product_filter(
            self.db.query(Review)
            .options(joinedload(Review.user))
            .filter(Review.approved.is_(True), Review.deleted.is_(False)),
            product_type,
            product_id,
        )
        return paginate(query.order_by(Review.created_at.desc(), Review.id.desc()), page, size)

    def fetch_user_reviews(
        self, user: User, page: int = 1, size: int = None
    ) -> Tuple[List[Review], dict]:
        query = (
            self.db.query(Review)
            .filter(Review.user_id == user.id, Review.deleted.is_(False))
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return paginate(query, page, size)
