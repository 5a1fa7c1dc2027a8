# app/models/subscription.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String

from app.core.database import Base
from app.models.enums import SubscriptionStatus
from app.models.product import ProductReferenceMixin, product_reference_check


class Subscription(ProductReferenceMixin, Base):
    """
    One user's entitlement to one product.

    Created as Pending before payment and flipped to Completed once the payment
    provider confirms it. A Completed subscription is never deleted.
    """

    __tablename__ = "subscriptions"
    __table_args__ = (product_reference_check("subscriptions"),)

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)

    status = Column(
        String(20), nullable=False, default=SubscriptionStatus.PENDING.value, index=True
    )
    payment_frequency = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)  # price at creation time

    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    # Optimistic concurrency: concurrent writers get a StaleDataError
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_completed(self) -> bool:
        return self.status == SubscriptionStatus.COMPLETED.value

    def __repr__(self):
        return (
            f"<Subscription(id={self.id}, user_id={self.user_id}, "
            f"product={self.product_type}:{self.product_id}, status={self.status})>"
        )
