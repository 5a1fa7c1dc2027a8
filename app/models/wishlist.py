from sqlalchemy import Column, DateTime, ForeignKey, Integer
from sqlalchemy.sql import func

from app.core.database import Base
from app.models.product import ProductReferenceMixin, product_reference_check


class Wishlist(ProductReferenceMixin, Base):
    __tablename__ = "wishlists"
    __table_args__ = (product_reference_check("wishlists"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
