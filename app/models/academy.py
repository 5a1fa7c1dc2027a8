# app/models/academy.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.sql import func

from app.core.database import Base

academy_courses = Table(
    "academy_courses",
    Base.metadata,
    Column(
        "academy_id",
        Integer,
        ForeignKey("academies.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "course_id",
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Academy(Base):
    """
    A bundle of courses sold as one product.

    ``validity`` is the subscription period in days; 0 means a one-off purchase.
    ``duration`` always equals the sum of the member courses' durations.
    """

    __tablename__ = "academies"

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    difficulty = Column(String(20), nullable=False)
    image_url = Column(Text, nullable=True)
    highlights = Column(JSON, nullable=False, default=list)
    requirements = Column(JSON, nullable=False, default=list)

    # Pricing
    price = Column(Numeric(10, 2), nullable=False)
    validity = Column(Integer, nullable=False, default=0)
    ref = Column(String(255), nullable=True)  # payment provider product id

    duration = Column(Integer, nullable=False, default=0)

    # Moderation
    submitted = Column(Boolean, default=False, nullable=False)
    approved = Column(Boolean, default=False, nullable=False)
    deleted = Column(Boolean, default=False, nullable=False)

    # Ratings
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

    @property
    def is_subscribable(self) -> bool:
        return (self.validity or 0) > 0

    def recompute_duration(self) -> int:
        self.duration = sum(course.duration or 0 for course in self.courses)
        return self.duration

    def __repr__(self):
        return f"<Academy(id={self.id}, name='{self.name}', price={self.price})>"
