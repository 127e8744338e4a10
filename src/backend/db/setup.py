"""
Database setup module for initializing default data.

The only seed is the bootstrap administrator: admin accounts cannot be
created through public registration, so the first one comes from the
ADMIN_* environment settings.
"""

import logging

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.security import hash_password
from db import User, UserRole

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class DatabaseSetup:
    """Handles default data setup."""

    def __init__(self):
        self.admin_email = settings.admin.email.strip().lower()
        self.admin_password = settings.admin.password
        self.admin_first_name = settings.admin.first_name
        self.admin_last_name = settings.admin.last_name

        logger.info("Database setup initialized with admin config:")
        logger.info(f"  Admin email: {self.admin_email}")
        logger.info(
            f"  Admin name: {self.admin_first_name} {self.admin_last_name}"
        )

    async def create_admin_user(self, db: AsyncSession) -> bool:
        """Create the bootstrap admin unless an account with that email exists."""
        if not self.admin_password:
            logger.warning(
                "ADMIN_PASSWORD is not set; skipping bootstrap admin creation"
            )
            return True

        logger.info("Creating default admin user...")

        try:
            result = await db.execute(
                select(User).where(User.email == self.admin_email)
            )
            existing = result.scalar_one_or_none()
            if existing:
                logger.info(
                    f"User '{self.admin_email}' already exists, skipping..."
                )
                return True

            admin = User(
                email=self.admin_email,
                password_hash=hash_password(self.admin_password),
                first_name=self.admin_first_name,
                last_name=self.admin_last_name,
                role=UserRole.ADMIN,
            )
            db.add(admin)
            await db.commit()

            logger.info(f"Admin user '{self.admin_email}' created")
            return True

        except Exception as e:
            logger.error(f"Error creating admin user: {e}")
            await db.rollback()
            return False

    async def setup_default_data(self, db: AsyncSession) -> bool:
        """Seed all default data. Returns False if any step failed."""
        logger.info("Setting up default database data...")
        success = await self.create_admin_user(db)
        if success:
            logger.info("Default data setup completed")
        else:
            logger.warning("Default data setup finished with errors")
        return success


async def setup_database_default_data(db: AsyncSession) -> bool:
    """Entry point used by the application lifespan."""
    return await DatabaseSetup().setup_default_data(db)
