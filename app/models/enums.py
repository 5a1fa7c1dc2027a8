from datetime import timedelta
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    USER = "user"


class ProductType(str, Enum):
    COURSE = "Course"
    ACADEMY = "Academy"


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class SubscriptionStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class PaymentFrequency(str, Enum):
    MONTH = "Month"
    YEAR = "Year"
    ONE_OFF = "One-Off"

    @property
    def period(self) -> timedelta:
        # One-off purchases never lapse in practice: 100 years
        return {
            PaymentFrequency.MONTH: timedelta(days=30),
            PaymentFrequency.YEAR: timedelta(days=365),
            PaymentFrequency.ONE_OFF: timedelta(days=36500),
        }[self]


class PaymentType(str, Enum):
    STRIPE = "Stripe"
    CRYPTO = "Crypto"


class PromoType(str, Enum):
    SITE_WIDE = "SiteWidePromo"
    INSTRUCTOR = "InstructorPromo"
