"""API routes module.

Exports all route handlers for the FastAPI application.
"""

from abtest.api.routes.experiments import router as experiments_router
from abtest.api.routes.health import router as health_router
from abtest.api.routes.users import router as users_router

__all__ = [
    "experiments_router",
    "health_router",
    "users_router",
]
