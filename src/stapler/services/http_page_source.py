"""HTTP page source backed by httpx.

Fetches pages from an endpoint that accepts ``offset`` and ``limit``
query parameters and returns a ``PaginatedResponse`` JSON body, such as
the demo ``/api/v1/lines`` route.
"""

import logging
from typing import TypeVar

import httpx
from pydantic import ValidationError

from src.stapler.domain.pagination import PaginatedResponse
from src.stapler.services.page_source import PageSource, ResponseError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HttpPageSource(PageSource[T]):
    """Page source issuing ``GET path?offset=..&limit=..`` requests.

    The caller owns the client (base URL, timeouts, transport) and closes
    it. Every transport failure, non-2xx status, or malformed body is
    raised as :class:`ResponseError`.

    Args:
        client: Async httpx client, usually with ``base_url`` set
        path: Endpoint path relative to the client's base URL
        item_type: Type each item in the response is validated as
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        path: str,
        item_type: type[T],
    ) -> None:
        self._client = client
        self._path = path
        self._response_model = PaginatedResponse[item_type]  # type: ignore[valid-type]

    async def fetch(self, offset: int, size: int) -> PaginatedResponse[T]:
        """Fetch one page.

        Raises:
            ResponseError: If the request fails or the body is invalid
        """
        params = {"offset": offset, "limit": size}
        try:
            response = await self._client.get(self._path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ResponseError(
                f"GET {self._path} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ResponseError(f"GET {self._path} failed: {exc}") from exc

        try:
            page = self._response_model.model_validate_json(response.content)
        except ValidationError as exc:
            raise ResponseError(
                f"GET {self._path} returned an invalid page: {exc}"
            ) from exc

        logger.debug(
            "Fetched %d items at offset %d (total=%d)",
            len(page.items),
            offset,
            page.total,
        )
        return page
