"""
FastAPI Main Application
Entry point for the League of Restaurant API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_settings
from ..db.session import init_db
from .errors import setup_error_handlers
from .middleware import RequestLoggingMiddleware, RequestTimingMiddleware
from .routers import health_router, reviews_router, stores_router

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Creates missing tables on startup.
    """
    logger.info("Starting League of Restaurant API...")
    init_db()
    logger.info("League of Restaurant API started successfully")

    yield

    logger.info("Shutting down League of Restaurant API...")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    logging.getLogger("lor").setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Set up CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add custom middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Set up error handlers
    setup_error_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(reviews_router)
    app.include_router(stores_router)

    return app


# Create app instance
app = create_app()


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information
    """
    settings = get_settings()

    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": settings.description,
        "endpoints": {
            "health": "/health",
            "status": "/status",
            "reviews": "/api/v1/reviews",
            "stores": "/api/v1/stores",
            "docs": "/docs",
        },
    }


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "lor.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
