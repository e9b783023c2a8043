"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from concession_map.config import settings
from concession_map.api.rate_limit import limiter
from concession_map.middleware.error_handler import ErrorHandlerMiddleware
from concession_map.api.v1.routers import basemap, concessions, datasets
from concession_map.api.dependencies import DashboardServiceDep, get_dashboard_service
from concession_map.infrastructure.dataset_client import get_dataset_client

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Loads both datasets on startup and closes the dataset client on
    shutdown. A failed load does not stop the application; it is reported
    through /api/v1/datasets/status and can be retried with a reload.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Dataset host: {settings.dataset_base_url}, centroid method: {settings.centroid_method}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")
    if not settings.maptiler_key:
        logger.warning("MAPTILER_KEY is not set; the base map style will not load")

    state = await get_dashboard_service().load()
    logger.info(f"Initial dataset load: {state.status}")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await get_dataset_client().close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Geospatial summary API for the oil palm concession map dashboard

    This API loads the concession polygons and pond points, and serves the
    values the map front end displays.

    ## Features

    - **Datasets**: Both feature collections are fetched in parallel on
      startup; their load state is exposed and a failed load can be retried
    - **Summary**: Total concession count and summed area in hectares
    - **Popups**: Centroid and labelled attributes for a hovered or clicked
      concession, with "N/A" for missing attributes
    - **Export**: The concessions CSV as a browser download
    - **Map config**: Base map style, initial view and overlay styling
    - **Rate Limiting**: Protects the upstream dataset host from abuse
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(datasets.router, prefix="/api/v1")
app.include_router(concessions.router, prefix="/api/v1")
app.include_router(basemap.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check(dashboard_service: DashboardServiceDep):
    """
    Health check endpoint.

    Returns:
        Health status, including the dataset load status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "datasets": dashboard_service.state.status,
    }
