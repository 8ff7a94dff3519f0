"""Centralized FastAPI dependency providers.

Service construction lives here so routers never read settings
directly. Values come from :func:`~src.stapler.config.get_settings` so
that ``STAPLER_*`` environment overrides are respected.
"""

from typing import Annotated

from fastapi import Depends

from src.stapler.config import Settings, get_settings
from src.stapler.services.lyrics_service import LyricsService


def get_lyrics_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> LyricsService:
    """Dependency provider for LyricsService."""
    return LyricsService(delay_seconds=settings.demo_delay_seconds)
