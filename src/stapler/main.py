"""FastAPI application entry point for the Stapler demo server."""

import logging

from src.stapler.config import get_settings

# Configure logging before importing modules
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

from fastapi import FastAPI  # noqa: E402

from src.stapler.api.routers import api_router  # noqa: E402

app = FastAPI(
    title="Stapler Demo",
    description="Paginated demo list consumed by the Stapler pagination controller",
    version="0.1.0",
)

# Include API routers
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
