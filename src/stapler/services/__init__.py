# Services package (pagination controller and page sources)

from src.stapler.services.action import Action
from src.stapler.services.http_page_source import HttpPageSource
from src.stapler.services.lyrics_service import LyricsService
from src.stapler.services.page_source import (
    PageFetcher,
    PageSizeViolationError,
    PageSource,
    ResponseError,
)
from src.stapler.services.stapler import Stapler

__all__ = [
    # Controller
    "Action",
    "Stapler",
    # Page source contract
    "PageFetcher",
    "PageSizeViolationError",
    "PageSource",
    "ResponseError",
    # Page sources
    "HttpPageSource",
    "LyricsService",
]
