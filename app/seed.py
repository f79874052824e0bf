"""Seed the administrator account if not present."""
import logging

from app.config import settings
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


async def seed_admin():
    existing = await User.find_one(User.email == settings.admin_email)
    if existing:
        if existing.role != UserRole.ADMIN or not existing.is_active:
            logger.warning("Seed admin %s exists but is not an active admin", settings.admin_email)
        return
    await User(
        email=settings.admin_email,
        display_name=settings.admin_display_name,
        role=UserRole.ADMIN,
    ).insert()
    logger.info("Seeded admin user %s", settings.admin_email)
