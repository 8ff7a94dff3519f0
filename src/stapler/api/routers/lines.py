"""API router serving the demo lyrics as a paginated list."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.stapler.api.dependencies import get_lyrics_service
from src.stapler.domain.lyric_line import LyricLine
from src.stapler.domain.pagination import MAX_PAGE_SIZE, PaginatedResponse
from src.stapler.services.lyrics_service import LyricsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lines", tags=["lines"])


@router.get("", response_model=PaginatedResponse[LyricLine])
async def list_lines(
    service: Annotated[LyricsService, Depends(get_lyrics_service)],
    limit: Annotated[
        int,
        Query(ge=1, le=MAX_PAGE_SIZE, description="Maximum items to return"),
    ] = 5,
    offset: Annotated[
        int,
        Query(ge=0, description="Number of items to skip"),
    ] = 0,
) -> PaginatedResponse[LyricLine]:
    """List lyric lines with pagination.

    Args:
        limit: Maximum number of lines to return (1-100, default 5)
        offset: Number of lines to skip (default 0)

    Returns:
        Page of lines plus the total line count
    """
    page = await service.fetch(offset, limit)
    logger.info(
        "Served %d lines at offset %d (total=%d)", len(page.items), offset, page.total
    )
    return page
