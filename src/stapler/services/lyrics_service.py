"""In-memory page source over the bundled demo lyrics.

Mimics a slow backend by sleeping before each page is returned.
"""

import asyncio
import logging

from src.stapler.data.lyrics import LYRICS
from src.stapler.domain.lyric_line import LyricLine
from src.stapler.domain.pagination import PaginatedResponse
from src.stapler.services.page_source import PageSource

logger = logging.getLogger(__name__)


class LyricsService(PageSource[LyricLine]):
    """Serves lyric lines in pages.

    Args:
        lines: Line texts to serve (defaults to the bundled song)
        delay_seconds: Simulated latency per page
    """

    def __init__(
        self,
        lines: tuple[str, ...] = LYRICS,
        delay_seconds: float = 0.0,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")
        self._lines = [
            LyricLine(index=index, text=text) for index, text in enumerate(lines)
        ]
        self._delay = delay_seconds

    @property
    def total(self) -> int:
        return len(self._lines)

    async def fetch(self, offset: int, size: int) -> PaginatedResponse[LyricLine]:
        """Return the lines in ``[offset, offset + size)``.

        An offset past the end yields an empty page with the real total.

        Raises:
            ValueError: If offset is negative or size is not positive
        """
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        if size < 1:
            raise ValueError(f"size must be >= 1, got {size}")

        if self._delay:
            await asyncio.sleep(self._delay)

        items = self._lines[offset : offset + size]
        logger.debug(
            "Serving %d lines at offset %d of %d", len(items), offset, self.total
        )
        return PaginatedResponse(
            items=items, total=self.total, limit=size, offset=offset
        )
