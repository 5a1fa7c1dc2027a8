from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from app.core.database import Base


class Lesson(Base):
    """
    A unit of a course. The course's ``duration`` includes every lesson's
    duration, so lesson writes move it.
    """

    __tablename__ = "lessons"
    __table_args__ = (
        UniqueConstraint("course_id", "position", name="uq_lessons_course_position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title = Column(String(255), nullable=False, unique=True)
    overview = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    position = Column(Integer, nullable=False)

    # Media
    image_url = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    downloadable_url = Column(Text, nullable=True)

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
        return f"<Lesson(id={self.id}, course_id={self.course_id}, title='{self.title}')>"
