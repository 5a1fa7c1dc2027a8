"""
Application initialization module
Handles initial setup tasks like creating the default admin account
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import PasswordHelper
from app.models.enums import UserRole
from app.models.user import User

logger = logging.getLogger(__name__)


def init_super_admin(db: Session) -> None:
    """
    Create the default admin account if no admin exists yet.

    Args:
        db: Database session
    """
    try:
        existing_admin = (
            db.query(User).filter(User.role == UserRole.ADMIN.value).first()
        )

        if existing_admin:
            logger.info(
                f"✅ Admin user already exists (ID: {existing_admin.id}, Username: {existing_admin.username})"
            )
            return

        super_admin = User(
            username=settings.admin_default_username,
            email=settings.admin_default_email,
            first_name="Super",
            last_name="Admin",
            hashed_password=PasswordHelper.hash_password(
                settings.admin_default_password
            ),
            role=UserRole.ADMIN.value,
            is_verified=True,
        )

        db.add(super_admin)
        db.commit()
        db.refresh(super_admin)

        logger.info("=" * 60)
        logger.info("🎉 SUPER ADMIN CREATED SUCCESSFULLY!")
        logger.info("=" * 60)
        logger.info(f"Username: {super_admin.username}")
        logger.info(f"Email: {settings.admin_default_email}")
        logger.warning("⚠️  IMPORTANT: Change the default password immediately!")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"❌ Failed to initialize super admin: {e}")
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.

    Args:
        db: Database session
    """
    logger.info("🚀 Starting application initialization...")

    init_super_admin(db)

    logger.info("✅ Application initialization completed!")
