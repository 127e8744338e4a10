"""
Application lifespan manager.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.config import settings
from core.database import AsyncSessionLocal
from core.logging_config import LogConfig
from . import tasks


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run startup tasks, serve, then release resources."""
    log_config = LogConfig(**settings.logging.log_config)
    await tasks.initialize_logging(log_config)

    logger = logging.getLogger("main")
    logger.info(f"Starting {settings.api.app_name} v{settings.api.app_version}...")

    await tasks.log_cors_configuration(settings, logger)
    await tasks.ensure_upload_directory(settings)
    await tasks.initialize_database()
    await tasks.setup_default_data(AsyncSessionLocal)

    yield

    logger.info(f"Shutting down {settings.api.app_name}...")
    await tasks.shutdown_database()
    await tasks.shutdown_logging()
