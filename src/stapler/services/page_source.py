"""Contract between the pagination controller and its data source.

A page source is any async callable taking ``(offset, size)`` and returning
a :class:`~src.stapler.domain.pagination.PaginatedResponse`. Transport or
server failures must be raised as :class:`ResponseError`; the controller
routes those to its error channels and lets anything else propagate.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Generic, Protocol, TypeVar

from src.stapler.domain.pagination import PaginatedResponse

T = TypeVar("T")


class PageFetcher(Protocol[T]):
    """Async callable ``(offset, size)`` returning one page."""

    def __call__(
        self, offset: int, size: int
    ) -> Awaitable[PaginatedResponse[T]]: ...


class ResponseError(Exception):
    """Raised by a page source when a page cannot be fetched."""


class PageSizeViolationError(ResponseError):
    """Raised when a page source returns more items than were requested."""


class PageSource(ABC, Generic[T]):
    """Object form of a page source; pass its bound ``fetch`` to the controller."""

    @abstractmethod
    async def fetch(self, offset: int, size: int) -> PaginatedResponse[T]:
        """Return the items in ``[offset, offset + size)`` and the total.

        Raises:
            ResponseError: If the page cannot be fetched
        """
