from .academy import router as academy_router
from .auth import router as auth_router
from .course import router as course_router
from .lesson import router as lesson_router
from .order import router as order_router
from .post import router as post_router
from .processors import router as processors_router
from .promo import router as promo_router
from .review import router as review_router
from .site_settings import router as site_settings_router
from .subscription import router as subscription_router
from .testimony import router as testimony_router
from .user import router as user_router
from .wishlist import router as wishlist_router

routes = [
    auth_router,
    user_router,
    course_router,
    lesson_router,
    academy_router,
    promo_router,
    subscription_router,
    order_router,
    processors_router,
    review_router,
    wishlist_router,
    testimony_router,
    post_router,
    site_settings_router,
]
