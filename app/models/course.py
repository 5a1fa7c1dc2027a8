# app/models/course.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from app.core.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    difficulty = Column(String(20), nullable=False)
    duration = Column(Integer, nullable=False, default=0)  # minutes
    image_url = Column(Text, nullable=True)

    # Pricing
    price = Column(Numeric(10, 2), nullable=False, default=0.00)

    # Moderation
    submitted = Column(Boolean, default=False, nullable=False)
    approved = Column(Boolean, default=False, nullable=False)

    # Ratings (aggregated from approved reviews)
    rating = Column(Integer, nullable=True)
    reviews_count = Column(Integer, nullable=False, default=0)

    # Instructor
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Timestamps
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
        return f"<Course(id={self.id}, name='{self.name}', price={self.price})>"
