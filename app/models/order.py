from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from app.core.database import Base


class Order(Base):
    """Immutable record of a completed payment."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    promo_id = Column(Integer, ForeignKey("promos.id"), nullable=True, index=True)

    order_code = Column(String(20), unique=True, nullable=False, index=True)
    transaction_ref = Column(String(255), unique=True, nullable=False, index=True)
    payment_type = Column(String(20), nullable=False)

    total = Column(Numeric(10, 2), nullable=False)
    grand_total = Column(Numeric(10, 2), nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Order(id={self.id}, code='{self.order_code}', grand_total={self.grand_total})>"
