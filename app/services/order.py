# app/services/order.py
import logging
import secrets
import string
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from app.core.decorator import db_exception
from app.core.exceptions import NotFoundError, UnauthorizedError
from app.models.enums import PaymentType
from app.models.order import Order
from app.models.promo import Promo
from app.models.user import User
from app.services.promo import compute_grand_total
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

ORDER_CODE_LENGTH = 10
ORDER_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_code(length: int = ORDER_CODE_LENGTH) -> str:
    return "".join(secrets.choice(ORDER_CODE_ALPHABET) for _ in range(length))


class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def _unique_order_code(self) -> str:
        while True:
            code = generate_order_code()
            if not self.db.query(Order.id).filter(Order.order_code == code).first():
                return code

    @db_exception
    def create_order(
        self,
        user_id: int,
        promo_id: Optional[int],
        total,
        transaction_ref: str,
        payment_type: PaymentType,
        grand_total,
        commit: bool = True,
    ) -> Order:
        """
        Record a completed payment.

        ``grand_total`` is what the provider actually charged; a disagreement with
        the recomputed discount is logged but never blocks the order.
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")

        promo = None
        if promo_id is not None:
            promo = self.db.query(Promo).filter(Promo.id == promo_id).first()
            if not promo:
                raise NotFoundError("Promo not found")

        total = Decimal(str(total))
        grand_total = Decimal(str(grand_total))

        percentage = promo.percentage if promo and promo.validated else 0
        expected = compute_grand_total(total, percentage)
        if expected != grand_total:
            logger.warning(
                f"Grand total mismatch for transaction {transaction_ref}: "
                f"expected {expected}, got {grand_total}"
            )

        order = Order(
            user_id=user.id,
            promo_id=promo.id if promo else None,
            order_code=self._unique_order_code(),
            transaction_ref=transaction_ref,
            payment_type=PaymentType(payment_type).value,
            total=total,
            grand_total=grand_total,
        )
        self.db.add(order)
        self.db.flush()

        if commit:
            self.db.commit()
            self.db.refresh(order)

        logger.info(
            f"Order {order.order_code} created for user {user.id} "
            f"(total={total}, grand_total={grand_total})"
        )
        return order

    def get_by_transaction_ref(self, transaction_ref: str) -> Optional[Order]:
        return (
            self.db.query(Order)
            .filter(Order.transaction_ref == transaction_ref)
            .first()
        )

    def fetch_order(self, order_id: int, current_user: User) -> Order:
        order = (
            self.db.query(Order)
            .options(joinedload(Order.user), joinedload(Order.promo))
            .filter(Order.id == order_id)
            .first()
        )
        if not order:
            raise NotFoundError("Order not found")

        if not current_user.is_admin and order.user_id != current_user.id:
            raise UnauthorizedError("User not permitted to view this order")

        return order

    def fetch_orders(
        self,
        current_user: User,
        page: int = 1,
        size: int = None,
        payment_type: Optional[PaymentType] = None,
        has_promo: Optional[bool] = None,
    ) -> Tuple[List[Order], dict]:
        query = self.db.query(Order).options(
            joinedload(Order.user), joinedload(Order.promo)
        )

        if not current_user.is_admin:
            query = query.filter(Order.user_id == current_user.id)

        if payment_type is not None:
            query = query.filter(Order.payment_type == PaymentType(payment_type).value)

        if has_promo is True:
            query = query.filter(Order.promo_id.isnot(None))
        elif has_promo is False:
            query = query.filter(Order.promo_id.is_(None))

        query = query.order_by(Order.created_at.desc(), Order.id.desc())
        return paginate(query, page, size)
