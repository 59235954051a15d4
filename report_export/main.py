"""
FastAPI application entry point for the report export service.

Wires the process-wide resources together:
- The asyncpg connection pool (init_db / close_db)
- One RendererPool owning the headless Chromium instance
- One ReportExporter, stored on app.state and injected into endpoints

On shutdown the renderer is closed before the database pool, so no render is
left holding a browser page while its cache upsert has nowhere to go.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from report_export import __version__
from report_export.api import api_router
from report_export.core.config import get_settings
from report_export.core.database import init_db, close_db
from report_export.services.export import ReportExporter
from report_export.services.renderer_pool import RendererPool

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for application startup and shutdown.

    On startup:
        - Initialize the database connection pool
        - Create the renderer pool and exporter (Chromium launches lazily)

    On shutdown:
        - Shut down the renderer
        - Close the database connection pool
    """
    settings = get_settings()

    logger.info("Report export API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # The pool is created lazily on first query if startup failed

    renderer = RendererPool(
        page_format=settings.pdf_page_format,
        headless=settings.renderer_headless,
    )
    app.state.exporter = ReportExporter(renderer, settings=settings)
    logger.info(f"PDF exports stored in {app.state.exporter.storage_dir}")

    yield

    logger.info("Report export API shutting down")
    try:
        await app.state.exporter.shutdown_renderer()
    except Exception as e:
        logger.error(f"Error shutting down renderer: {e}")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Report Export API",
    version=__version__,
    description=(
        "Cached PDF snapshot export of published weekly reports, "
        "co-branded per tenant."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy' and whether the renderer is running
    """
    exporter = getattr(app.state, 'exporter', None)
    return {
        "status": "healthy",
        "renderer_running": bool(exporter and exporter.renderer.is_running),
    }


@app.get("/")
async def root():
    """Root endpoint providing API information."""
    return {
        "name": "Report Export API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "report_export.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
