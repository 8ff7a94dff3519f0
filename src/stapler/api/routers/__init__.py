"""API routers package."""

from fastapi import APIRouter

from src.stapler.api.routers.lines import router as lines_router

api_router = APIRouter()

# Paginated demo list
api_router.include_router(lines_router)
