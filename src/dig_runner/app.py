"""FastAPI application entry point."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dig_runner.api.healthcheck import router as healthcheck_router
from dig_runner.api.routes import get_dependencies, router
from dig_runner.core.config import get_settings
from dig_runner.utils.decorators import init_sentry

# Configure logging for the application
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logging.getLogger("dig_runner").setLevel(get_settings().log_level.upper())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifespan handler."""
    # Startup
    init_sentry()
    settings = get_settings()
    deps = get_dependencies()

    logger.info("dig runner starting...")
    logger.info(f"dig: {deps.runner.which(settings.dig_binary) or 'not found'}")
    logger.info(f"Timeout strategy: {deps.runner.strategy.name}")
    logger.info(f"Default server: {settings.default_server}")
    logger.info(f"Sentry: {'enabled' if settings.use_sentry else 'disabled'}")

    yield

    logger.info("dig runner shutting down...")


app = FastAPI(
    title="dig runner",
    description="HTTP wrapper around dig answer-section lookups",
    version="1.0.0",
    lifespan=lifespan,
)

# Include API routes
app.include_router(router)
app.include_router(healthcheck_router)
