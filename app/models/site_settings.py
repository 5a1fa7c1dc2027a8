from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class SiteSettings(Base):
    """Homepage banner shown by the storefront."""

    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True, index=True)
    banner_url = Column(Text, nullable=True)
    banner_caption = Column(String(255), nullable=True)
    banner_text = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
