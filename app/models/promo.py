from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func

from app.core.database import Base
from app.models.enums import PromoType


class Promo(Base):
    __tablename__ = "promos"

    id = Column(Integer, primary_key=True, index=True)

    code = Column(String(50), unique=True, nullable=False, index=True)
    percentage = Column(Numeric(5, 2), nullable=False)
    promo_type = Column(String(30), nullable=False, default=PromoType.SITE_WIDE.value)
    # Only validated promos discount a checkout. No expiry date exists.
    validated = Column(Boolean, default=False, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Promo(id={self.id}, code='{self.code}', percentage={self.percentage})>"
