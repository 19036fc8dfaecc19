"""
API Routers
FastAPI route handlers.
"""

from .health import router as health_router
from .reviews import router as reviews_router
from .stores import router as stores_router

__all__ = [
    "health_router",
    "reviews_router",
    "stores_router",
]
