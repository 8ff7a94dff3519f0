"""Console consumer for the pagination controller.

Plays the part of a list UI: binds to the controller's observables,
runs the initial load, then "scrolls" by reporting the last row as
displayed several times per page until every page is loaded, and finally
pulls to refresh.

Usage::

    python -m src.stapler.demo            # in-process demo data
    python -m src.stapler.demo --http     # against a running demo server
"""

import argparse
import asyncio
import logging
import sys

import httpx

from src.stapler.config import Settings, get_settings
from src.stapler.domain.lyric_line import LyricLine
from src.stapler.services.http_page_source import HttpPageSource
from src.stapler.services.lyrics_service import LyricsService
from src.stapler.services.page_source import PageFetcher, ResponseError
from src.stapler.services.stapler import Stapler

logger = logging.getLogger(__name__)

# Scroll events reported per rendered page; all but the first are no-ops
_SCROLL_TICKS_PER_PAGE = 3


async def browse(stapler: Stapler[LyricLine]) -> int:
    """Load every page the way a scrolling list would, then refresh.

    Returns:
        Exit code (0 for success, 1 if any load failed)
    """
    failures: list[ResponseError] = []
    stapler.initial_load_action.errors.observe(failures.append)
    stapler.refresh_action.errors.observe(failures.append)
    stapler.errors_2nd_page_and_later.observe(failures.append)

    stapler.items.observe(
        lambda items: logger.info("Rendering %d lines", len(items)), replay=False
    )
    stapler.should_show_next_page_activity_indicator.observe(
        lambda more: logger.info("Footer spinner %s", "shown" if more else "hidden")
    )

    try:
        await stapler.initial_load()
    except ResponseError:
        logger.error("Initial load failed")
        return 1

    while stapler.has_more_pages:
        last_row = len(stapler.items.value) - 1
        tasks = [
            stapler.item_will_display(last_row)
            for _ in range(_SCROLL_TICKS_PER_PAGE)
        ]
        started = [task for task in tasks if task is not None]
        logger.debug("%d of %d scroll ticks started a fetch", len(started), len(tasks))
        await asyncio.gather(*started)
        if failures:
            logger.error("Next page failed: %s", failures[-1])
            return 1

    for line in stapler.items.value:
        print(f"{line.index + 1:>3}  {line.text}")

    try:
        await stapler.refresh()
    except ResponseError:
        logger.error("Refresh failed")
        return 1

    logger.info(
        "After refresh: %d pages, %d of %d lines",
        stapler.pages.value,
        len(stapler.items.value),
        stapler.total.value,
    )
    return 0


async def run(settings: Settings, use_http: bool) -> int:
    """Build a page source from settings and browse it."""
    if not use_http:
        source = LyricsService(delay_seconds=settings.demo_delay_seconds)
        fetch: PageFetcher[LyricLine] = source.fetch
        return await browse(Stapler(settings.page_size, fetch))

    async with httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.http_timeout_seconds,
    ) as client:
        http_source = HttpPageSource(client, settings.lines_path, LyricLine)
        return await browse(Stapler(settings.page_size, http_source.fetch))


def main(argv: list[str] | None = None) -> int:
    """Run the console demo.

    Returns:
        Exit code (0 for success, 1 for any failed load)
    """
    parser = argparse.ArgumentParser(description="Stapler pagination demo")
    parser.add_argument(
        "--http",
        action="store_true",
        help="fetch pages from the demo server instead of in-process data",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(run(settings, args.http))


if __name__ == "__main__":
    sys.exit(main())
