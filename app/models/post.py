from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class Post(Base):
    """
    A community post. A post with ``parent_id`` is a comment on its parent;
    ``comments_count`` counts the parent's published comments.
    """

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("posts.id"), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    overview = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(Text, nullable=True)

    comments_count = Column(Integer, nullable=False, default=0)
    published = Column(Boolean, default=False, nullable=False)
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

    @property
    def visible_comments(self):
        return [c for c in self.comments if c.published and not c.deleted]

    def __repr__(self):
        return f"<Post(id={self.id}, title='{self.title}', published={self.published})>"
