# app/services/subscription.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.models.academy import Academy
from app.models.enums import PaymentFrequency, ProductType, SubscriptionStatus
from app.models.order import Order
from app.models.subscription import Subscription
from app.models.user import User
from app.schemas.common import ProductRef
from app.services.product import Product, get_product
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self, db: Session):
        self.db = db

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    @db_exception
    def create_subscriptions(
        self,
        user_id: int,
        payment_frequency: PaymentFrequency,
        products: List[ProductRef],
        order_id: Optional[int] = None,
        commit: bool = True,
    ) -> List[Subscription]:
        """
        Create one Pending subscription per product.

        Every product is resolved before anything is written, so a single missing
        product fails the whole batch.
        """
        user = self._get_user(user_id)

        if order_id is not None:
            if not self.db.query(Order).filter(Order.id == order_id).first():
                raise NotFoundError("Order not found")

        resolved = [get_product(self.db, ref.product_type, ref.product_id) for ref in products]

        frequency = PaymentFrequency(payment_frequency)
        created_at = datetime.utcnow()
        expires_at = created_at + frequency.period

        subscriptions = []
        for product in resolved:
            subscription = Subscription(
                user_id=user.id,
                order_id=order_id,
                status=SubscriptionStatus.PENDING.value,
                payment_frequency=frequency.value,
                amount=Decimal(str(product.price)),
                created_at=created_at,
                expires_at=expires_at,
            )
            subscription.set_product(product)
            subscriptions.append(subscription)

        self.db.add_all(subscriptions)
        self.db.flush()

        if commit:
            self.db.commit()
            for subscription in subscriptions:
                self.db.refresh(subscription)

        logger.info(
            f"Created {len(subscriptions)} pending subscription(s) for user {user.id}: "
            f"{[s.id for s in subscriptions]}"
        )
        return subscriptions

    def get_subscription(self, subscription_id: int) -> Optional[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.id == subscription_id)
            .first()
        )

    def get_subscriptions(self, subscription_ids: Iterable[int]) -> List[Subscription]:
        ids = list(subscription_ids)
        if not ids:
            return []
        return (
            self.db.query(Subscription)
            .filter(Subscription.id.in_(ids))
            .order_by(Subscription.id)
            .all()
        )

    @db_exception
    def delete_subscription(self, subscription_id: int, user_id: int) -> str:
        user = self._get_user(user_id)

        subscription = self.get_subscription(subscription_id)
        if not subscription:
            raise NotFoundError("Subscription not found")

        if subscription.user_id != user.id:
            raise UnauthorizedError("User not permitted to delete this subscription")

        if subscription.is_completed:
            raise ConflictError("Completed subscriptions cannot be deleted")

        product = subscription.product
        self.db.delete(subscription)
        self.db.flush()

        # Another Completed subscription still grants the product
        if product is not None and not self._has_completed(user.id, product):
            self._remove_from_user_products(user, product)

        self.db.commit()

        logger.info(f"Subscription {subscription_id} deleted by user {user.id}")
        return "Subscription successfully deleted"

    def _base_query(self):
        return self.db.query(Subscription).options(
            joinedload(Subscription.user),
            joinedload(Subscription.order),
            joinedload(Subscription.course),
            joinedload(Subscription.academy),
        )

    def fetch_subscriptions(
        self,
        current_user: User,
        page: int = 1,
        size: int = None,
        status: Optional[SubscriptionStatus] = None,
        product_type: Optional[ProductType] = None,
    ) -> Tuple[List[Subscription], dict]:
        """Admins see every subscription, everybody else only their own."""
        query = self._base_query()

        if not current_user.is_admin:
            query = query.filter(Subscription.user_id == current_user.id)

        if status is not None:
            query = query.filter(Subscription.status == SubscriptionStatus(status).value)

        if product_type is not None:
            query = query.filter(
                Subscription.product_type == ProductType(product_type).value
            )

        query = query.order_by(Subscription.created_at.desc(), Subscription.id.desc())
        return paginate(query, page, size)

    def fetch_user_subscriptions(
        self, user_id: int, page: int = 1, size: int = None
    ) -> Tuple[List[Subscription], dict]:
        user = self._get_user(user_id)
        query = (
            self._base_query()
            .filter(Subscription.user_id == user.id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        )
        return paginate(query, page, size)

    def complete_subscriptions(
        self, subscriptions: List[Subscription], order: Order
    ) -> List[Subscription]:
        """
        Flip Pending subscriptions to Completed and link them to ``order``.

        Does not commit: the caller owns the transaction.
        """
        completed = []
        for subscription in subscriptions:
            if subscription.order_id is None:
                subscription.order_id = order.id
            if subscription.is_completed:
                continue
            subscription.status = SubscriptionStatus.COMPLETED.value
            self._add_to_user_products(subscription.user, subscription.product)
            completed.append(subscription)
        logger.info(
            f"Order {order.id}: completed subscriptions {[s.id for s in completed]}"
        )
        return completed

    def _completed_query(self, user_id: int, product: Product):
        query = self.db.query(Subscription).filter(
            Subscription.user_id == user_id,
            Subscription.status == SubscriptionStatus.COMPLETED.value,
        )
        if isinstance(product, Academy):
            return query.filter(Subscription.academy_id == product.id)
        return query.filter(Subscription.course_id == product.id)

    def _has_completed(self, user_id: int, product: Product) -> bool:
        return self.db.query(self._completed_query(user_id, product).exists()).scalar()

    def has_access(self, user_id: int, product: Product) -> bool:
        """A Completed, unexpired subscription to ``product`` exists."""
        query = self._completed_query(user_id, product).filter(
            Subscription.expires_at > datetime.utcnow()
        )
        return self.db.query(query.exists()).scalar()

    @staticmethod
    def _add_to_user_products(user: User, product: Optional[Product]) -> None:
        if product is None:
            return
        bucket = (
            user.subscribed_academies
            if isinstance(product, Academy)
            else user.subscribed_courses
        )
        if product not in bucket:
            bucket.append(product)

    @staticmethod
    def _remove_from_user_products(user: User, product: Optional[Product]) -> None:
        if product is None:
            return
        bucket = (
            user.subscribed_academies
            if isinstance(product, Academy)
            else user.subscribed_courses
        )
        if product in bucket:
            bucket.remove(product)
