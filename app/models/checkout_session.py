from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base


class CheckoutSession(Base):
    """
    Correlates a payment provider session with the subscriptions it pays for.

    Looked up by provider session id (one-off payments) or provider customer id
    (recurring invoices) when the webhook fires.
    """

    __tablename__ = "checkout_sessions"

    id = Column(Integer, primary_key=True, index=True)

    provider_session_id = Column(String(255), unique=True, nullable=False, index=True)
    provider_customer_id = Column(String(255), nullable=False, index=True)
    mode = Column(String(20), nullable=False)  # payment | subscription

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    promo_id = Column(Integer, ForeignKey("promos.id"), nullable=True)
    payment_type = Column(String(20), nullable=False)
    subscription_ids = Column(JSON, nullable=False, default=list)

    # Set once the payment has been turned into an order
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)

    version = Column(Integer, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_fulfilled(self) -> bool:
        return self.order_id is not None
