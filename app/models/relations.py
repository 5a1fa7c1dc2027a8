# app/models/relations.py

from sqlalchemy.orm import relationship

# Import all relevant models
from .academy import Academy
from .course import Course
from .lesson import Lesson
from .order import Order
from .post import Post
from .promo import Promo
from .review import Review
from .session import UserSession
from .subscription import Subscription
from .testimony import Testimony
from .user import User
from .wishlist import Wishlist


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Catalog Relationships ---

    # 1. Academy <-> Course (Many-to-Many)
    Academy.courses = relationship(
        "Course",
        secondary="academy_courses",
        back_populates="academies",
        order_by="Course.id",
    )
    Course.academies = relationship(
        "Academy",
        secondary="academy_courses",
        back_populates="courses",
    )

    # 2. Tags (Many-to-Many)
    Course.tags = relationship("Tag", secondary="course_tags", order_by="Tag.name")
    Academy.tags = relationship("Tag", secondary="academy_tags", order_by="Tag.name")

    # 3. Instructor ownership
    Course.instructor = relationship("User", foreign_keys=[Course.user_id])
    Academy.instructor = relationship("User", foreign_keys=[Academy.user_id])

    # --- Entitlement Relationships ---

    # 4. User to Subscriptions (One-to-Many)
    User.subscriptions = relationship(
        "Subscription",
        back_populates="user",
        order_by="Subscription.created_at.desc()",
    )
    Subscription.user = relationship("User", back_populates="subscriptions")

    # 5. Denormalized subscribed products
    User.subscribed_courses = relationship("Course", secondary="user_courses")
    User.subscribed_academies = relationship("Academy", secondary="user_academies")

    # --- Ledger Relationships ---

    # 6. Order to Subscriptions (One-to-Many)
    Order.subscriptions = relationship("Subscription", back_populates="order")
    Subscription.order = relationship("Order", back_populates="subscriptions")

    # 7. Order owner and promo
    Order.user = relationship("User", foreign_keys=[Order.user_id])
    Order.promo = relationship("Promo")
    Promo.creator = relationship("User", foreign_keys=[Promo.user_id])

    # --- Feedback Relationships ---

    # 8. Reviews & wishlists
    Review.user = relationship("User")
    Wishlist.user = relationship("User")

    # --- Content Relationships ---

    # 9. Course lessons (One-to-Many)
    Course.lessons = relationship(
        "Lesson",
        back_populates="course",
        order_by="Lesson.position",
        cascade="all, delete-orphan",
    )
    Lesson.course = relationship("Course", back_populates="lessons")

    # 10. Community
    Testimony.user = relationship("User")
    Post.user = relationship("User")
    Post.parent = relationship("Post", remote_side=[Post.id], back_populates="comments")
    Post.comments = relationship("Post", back_populates="parent", order_by="Post.id")

    # 11. Login sessions
    UserSession.user = relationship("User")
