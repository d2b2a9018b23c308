"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pipeline_dashboard import __version__
from pipeline_dashboard.api.routes import automation, channels, dashboard, health, jobs
from pipeline_dashboard.config import settings
from pipeline_dashboard.logging import get_logger, setup_logging
from pipeline_dashboard.services.dispatcher import AlreadyRunning

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("application_starting", version=__version__)

    # Startup: verify database connection
    try:
        from pipeline_dashboard.db.session import init_db

        init_db()
        logger.info("database_connected")
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))
        # Don't raise - let health checks report the issue

    yield

    # Shutdown
    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Content Pipeline Dashboard",
    description="Live view and automation control for the video content pipeline",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health.router)
app.include_router(dashboard.router, prefix="/api/v1")
app.include_router(automation.router, prefix="/api/v1")
app.include_router(jobs.router, prefix="/api/v1")
app.include_router(channels.router, prefix="/api/v1")


@app.exception_handler(AlreadyRunning)
async def already_running_handler(request: Request, exc: AlreadyRunning) -> JSONResponse:
    """Answer a daily trigger that overlaps a run still in flight."""
    logger.warning(
        "daily_trigger_conflict", path=request.url.path, running_jobs=len(exc.job_ids)
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": {
                "message": str(exc),
                "running_jobs": [str(job_id) for job_id in exc.job_ids],
            }
        },
    )


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint redirect to docs."""
    return {
        "name": "Content Pipeline Dashboard",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pipeline_dashboard.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
