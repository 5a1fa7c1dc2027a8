from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.sql import func

from app.core.database import Base
from app.models.product import ProductReferenceMixin, product_reference_check


class Review(ProductReferenceMixin, Base):
    __tablename__ = "reviews"
    __table_args__ = (product_reference_check("reviews"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    star_rating = Column(Integer, nullable=False)  # 1..5
    comment = Column(Text, nullable=False)
    approved = Column(Boolean, default=False, nullable=False)
    deleted = Column(Boolean, default=False, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
