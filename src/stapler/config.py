"""Centralized application settings via pydantic-settings.

Loads configuration from environment variables with the STAPLER_ prefix.
Defaults match the bundled demo (five items per page, half a second of
simulated latency).
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from src.stapler.domain.pagination import MAX_PAGE_SIZE


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Examples:
        Request larger pages in the console demo::

            STAPLER_PAGE_SIZE=10 python -m src.stapler.demo

        Point the HTTP page source at another server::

            STAPLER_API_BASE_URL=http://api:8000 python -m src.stapler.demo --http
    """

    # Pagination
    page_size: int = Field(default=5, ge=1, le=MAX_PAGE_SIZE)

    # Demo data source
    demo_delay_seconds: float = Field(default=0.5, ge=0)

    # HTTP page source
    api_base_url: str = "http://localhost:8000"
    lines_path: str = "/api/v1/lines"
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "STAPLER_"}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton.

    Uses lru_cache so the Settings object is created once and reused
    across FastAPI Depends injections and the console demo.
    """
    return Settings()
