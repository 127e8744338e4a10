"""
Lifespan startup and shutdown task functions.

Each function handles one step of the startup or shutdown sequence.
"""

import logging
from pathlib import Path

logger = logging.getLogger("main")


async def initialize_logging(log_config):
    """Setup logging configuration."""
    from core.logging_config import setup_logging

    setup_logging(log_config)


async def log_cors_configuration(settings, logger):
    logger.info(f"CORS Allowed Origins: {settings.cors.origins}")


async def ensure_upload_directory(settings):
    """Create the attachment directory if it is missing."""
    upload_dir = Path(settings.file_upload.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Upload directory ready: {upload_dir.resolve()}")


async def initialize_database():
    """Create missing tables. Schema changes go through Alembic."""
    from core.database import check_database, init_db

    if not await check_database():
        raise RuntimeError("Database is not reachable; refusing to start")
    await init_db()
    logger.info("Database initialized")


async def setup_default_data(session_factory):
    """Seed the bootstrap admin account."""
    from db.setup import setup_database_default_data

    async with session_factory() as db:
        try:
            if await setup_database_default_data(db):
                logger.info("Default data setup completed successfully")
            else:
                logger.error("Default data setup failed - check logs above")
        except Exception as e:
            logger.error(f"Error during default data setup: {e}")


async def shutdown_database():
    """Close database connections."""
    from core.database import close_db

    await close_db()
    logger.info("Database connections closed")


async def shutdown_logging():
    """Flush and stop the background log writer."""
    from core.logging_config import stop_queue_listener

    stop_queue_listener()
