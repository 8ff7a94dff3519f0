"""Pagination controller for incrementally loaded server-backed lists.

Loads the first page on demand, reloads it on refresh, and fetches later
pages one at a time as the consumer asks for them. Accumulated items and
counters are exposed as observable properties so a UI can bind to them.

Concurrency model:
- ``initial_load()`` and ``refresh()`` are never guarded. Overlapping
  calls race and the last completion wins on items, pages and total.
- ``load_next_page_if_needed()`` is single-flight. Its eligibility check
  and the setting of the next-page in-flight flag happen in one
  synchronous step on the event loop, so repeated triggers (e.g. one per
  scroll tick) start at most one fetch.
- A next-page load is not cancelled by a refresh that starts after it;
  its items are appended to whatever list is current when it completes.
"""

import asyncio
import logging
from typing import Generic, TypeVar

from src.stapler.domain.operation import OperationKind
from src.stapler.domain.pagination import PageRequest, PaginatedResponse
from src.stapler.services.action import Action
from src.stapler.services.page_source import (
    PageFetcher,
    PageSizeViolationError,
    ResponseError,
)
from src.stapler.utils.observable import (
    MutableProperty,
    Property,
    Signal,
    commit,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Stapler(Generic[T]):
    """Owns the accumulated items of a paginated list and the loads that fill it.

    Invariant: while no next-page load is in flight, ``pages * page_size``
    is the offset the next next-page fetch requests. ``total`` is whatever
    the server reported last and may differ from ``len(items)``.

    Args:
        page_size: Number of items requested per page (positive, fixed)
        fetch: Async callable ``(offset, size) -> PaginatedResponse``
            raising ``ResponseError`` on failure
    """

    def __init__(self, page_size: int, fetch: PageFetcher[T]) -> None:
        if isinstance(page_size, bool) or not isinstance(page_size, int):
            raise TypeError(f"page_size must be an int, got {page_size!r}")
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")

        self._page_size = page_size
        self._fetch = fetch

        self._items: MutableProperty[tuple[T, ...]] = MutableProperty(())
        self._pages: MutableProperty[int] = MutableProperty(0)
        self._total: MutableProperty[int] = MutableProperty(0)

        self._initial_load_action: Action[None] = Action(
            OperationKind.INITIAL_LOAD, self._load_first_page
        )
        self._refresh_action: Action[None] = Action(
            OperationKind.REFRESH, self._load_first_page
        )
        self._next_page_action: Action[None] = Action(
            OperationKind.NEXT_PAGE, self._load_page_at
        )

        self._should_show_next_page_activity_indicator = self._pages.combine_latest(
            self._total
        ).map(lambda pages_total: pages_total[0] * page_size < pages_total[1])

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def items(self) -> Property[tuple[T, ...]]:
        """Items accumulated so far, as an immutable snapshot."""
        return self._items

    @property
    def pages(self) -> Property[int]:
        """Number of pages loaded. Initially 0."""
        return self._pages

    @property
    def total(self) -> Property[int]:
        """Total item count last reported by the server. Initially 0."""
        return self._total

    @property
    def should_show_next_page_activity_indicator(self) -> Property[bool]:
        """True while more pages exist on the server than have been loaded.

        This means "more available", not "currently loading". Combine it
        with ``is_loading_next_page`` for a strict loading spinner. Status
        of the first page is on ``initial_load_action`` or
        ``refresh_action``.
        """
        return self._should_show_next_page_activity_indicator

    @property
    def errors_2nd_page_and_later(self) -> Signal[ResponseError]:
        """Errors from next-page loads; first-page errors are on the actions."""
        return self._next_page_action.errors

    @property
    def is_loading_next_page(self) -> Property[bool]:
        return self._next_page_action.is_executing

    @property
    def initial_load_action(self) -> Action[None]:
        """Loads the first page; has its own in-flight and error status."""
        return self._initial_load_action

    @property
    def refresh_action(self) -> Action[None]:
        """Reloads the first page, discarding later pages on success."""
        return self._refresh_action

    @property
    def next_offset(self) -> int:
        """Offset the next next-page fetch will request."""
        return self._pages.value * self._page_size

    @property
    def has_more_pages(self) -> bool:
        return self._total.value > self.next_offset

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def initial_load(self) -> None:
        """Load the first page.

        Raises:
            ResponseError: If the page source fails; also sent on
                ``initial_load_action.errors``
        """
        await self._initial_load_action.apply()

    async def refresh(self) -> None:
        """Reload the first page. Load the rest with ``load_next_page_if_needed``.

        Raises:
            ResponseError: If the page source fails; also sent on
                ``refresh_action.errors``
        """
        await self._refresh_action.apply()

    def load_next_page_if_needed(self) -> "asyncio.Task[None] | None":
        """Start loading the next page unless one is loading or none is left.

        Safe to call many times in a row: while a refresh or another
        next-page load is in flight, or when every page is loaded, the
        call does nothing. Must be called from the event loop thread.

        Returns:
            The task running the fetch, or None when the call was a no-op
        """
        # Check and start with no await in between
        if self._refresh_action.is_executing.value:
            logger.debug("Next page skipped: refresh in flight")
            return None
        if self._next_page_action.is_executing.value:
            logger.debug("Next page skipped: already loading")
            return None
        if not self.has_more_pages:
            logger.debug(
                "Next page skipped: %d of %d items requested",
                self.next_offset,
                self._total.value,
            )
            return None
        return self._next_page_action.start(self.next_offset)

    def item_will_display(self, index: int) -> "asyncio.Task[None] | None":
        """Load the next page if the item about to be shown is the last one."""
        if index != len(self._items.value) - 1:
            return None
        return self.load_next_page_if_needed()

    # ------------------------------------------------------------------
    # Fetch routines
    # ------------------------------------------------------------------

    async def _load_first_page(self) -> None:
        response = await self._request(0)
        commit(
            (self._pages, 1),
            (self._items, tuple(response.items)),
            (self._total, response.total),
        )
        logger.info(
            "Loaded first page: %d items, total=%d",
            len(response.items),
            response.total,
        )

    async def _load_page_at(self, offset: int) -> None:
        response = await self._request(offset)
        commit(
            (self._items, self._items.value + tuple(response.items)),
            (self._total, response.total),
            (self._pages, self._pages.value + 1),
        )
        logger.info(
            "Loaded page %d: %d items, total=%d",
            self._pages.value,
            len(response.items),
            response.total,
        )

    async def _request(self, offset: int) -> PaginatedResponse[T]:
        request = PageRequest(offset=offset, size=self._page_size)
        logger.debug("Fetching offset=%d size=%d", request.offset, request.size)
        response = await self._fetch(request.offset, request.size)
        if len(response.items) > request.size:
            raise PageSizeViolationError(
                f"Page at offset {request.offset} has {len(response.items)} items, "
                f"requested at most {request.size}"
            )
        return response
