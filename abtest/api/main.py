"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from abtest.api.config import get_api_settings
from abtest.api.routes import experiments_router, health_router, users_router
from abtest.config import settings

api_settings = get_api_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting up A/B testing API...")
    logger.info(
        f"Winner selection: min {settings.min_sample_size} users per variant, "
        f"confidence > {settings.confidence_threshold}%"
    )

    yield

    logger.info("Shutting down A/B testing API...")


app = FastAPI(
    title=api_settings.api_title,
    version=api_settings.api_version,
    description=api_settings.api_description,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(experiments_router)
app.include_router(users_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": api_settings.api_title,
        "version": api_settings.api_version,
        "docs": "/docs",
        "health": "/health",
    }
