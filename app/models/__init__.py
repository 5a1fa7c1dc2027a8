"""
Models package initialization
Import all models and setup relationships
"""

from .academy import Academy, academy_courses
from .checkout_session import CheckoutSession
from .course import Course
from .lesson import Lesson
from .order import Order
from .post import Post
from .promo import Promo

# Import and setup relationships
from .relations import setup_relationships
from .review import Review
from .session import UserSession
from .site_settings import SiteSettings
from .subscription import Subscription
from .testimony import Testimony
from .tag import Tag, academy_tags, course_tags
from .user import User, user_academies, user_courses
from .wishlist import Wishlist

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Academy",
    "CheckoutSession",
    "Course",
    "Lesson",
    "Order",
    "Post",
    "Promo",
    "Review",
    "SiteSettings",
    "Subscription",
    "Tag",
    "Testimony",
    "User",
    "UserSession",
    "Wishlist",
    "academy_courses",
    "academy_tags",
    "course_tags",
    "user_academies",
    "user_courses",
]
