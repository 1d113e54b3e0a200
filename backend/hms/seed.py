"""
Bootstrap admin seeder.

Public registration only ever creates patient accounts, so the first admin
has to come from configuration: when ``ADMIN_EMAIL`` and ``ADMIN_PASSWORD``
are both set, an admin user with those credentials is created on startup.

This seeder is idempotent: an existing account with that email is left
untouched, whatever its role.
"""
import logging

from .core.config import settings
from .core.security import get_password_hash
from .models.base import SessionLocal, generate_uuid
from .models.user import User, UserRole

logger = logging.getLogger(__name__)


def seed_admin() -> None:
    """Create the configured admin user if it does not already exist."""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        logger.debug("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin seed")
        return

    email = settings.ADMIN_EMAIL.strip().lower()
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            db.rollback()
            return
        admin = User(
            id=generate_uuid(),
            name=settings.ADMIN_NAME,
            email=email,
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
        )
        db.add(admin)
        db.commit()
        logger.info("[seed] Created admin user: %s", email)
    finally:
        db.close()
