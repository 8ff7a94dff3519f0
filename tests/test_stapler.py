"""Tests for the Stapler pagination controller.

Covers first-page loads, refresh, the single-flight next-page guard, error
routing per operation, and the documented race between overlapping
first-page loads. All page sources are in-memory fakes; fetches can be
held open with an ``asyncio.Event`` to observe in-flight behaviour.
"""

import asyncio

import pytest

from src.stapler.domain.pagination import PaginatedResponse
from src.stapler.services.page_source import (
    PageFetcher,
    PageSizeViolationError,
    ResponseError,
)
from src.stapler.services.stapler import Stapler


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakePageSource:
    """Serves ``item-<n>`` strings and records every fetch."""

    def __init__(self, total: int = 23) -> None:
        self.items = [f"item-{n}" for n in range(total)]
        self.calls: list[tuple[int, int]] = []
        self.fail_offsets: set[int] = set()
        self.gate: asyncio.Event | None = None

    async def fetch(self, offset: int, size: int) -> PaginatedResponse[str]:
        self.calls.append((offset, size))
        if self.gate is not None:
            await self.gate.wait()
        if offset in self.fail_offsets:
            raise ResponseError(f"server error at offset {offset}")
        return PaginatedResponse(
            items=self.items[offset : offset + size], total=len(self.items)
        )


async def _drain() -> None:
    """Let scheduled tasks run until they block."""
    for _ in range(5):
        await asyncio.sleep(0)


async def _load_all(stapler: Stapler[str]) -> None:
    while (task := stapler.load_next_page_if_needed()) is not None:
        await task


def _snapshot(stapler: Stapler[str]) -> tuple[tuple[str, ...], int, int]:
    return stapler.items.value, stapler.pages.value, stapler.total.value


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    """Tests for initial state and argument validation."""

    def test_initial_state_is_empty(self) -> None:
        """A new controller has no items, no pages and a zero total."""
        stapler = Stapler(5, FakePageSource().fetch)
        assert stapler.items.value == ()
        assert stapler.pages.value == 0
        assert stapler.total.value == 0
        assert stapler.should_show_next_page_activity_indicator.value is False
        assert stapler.next_offset == 0

    @pytest.mark.parametrize("page_size", [0, -1])
    def test_page_size_must_be_positive(self, page_size: int) -> None:
        """Non-positive page sizes are rejected."""
        with pytest.raises(ValueError, match="page_size must be >= 1"):
            Stapler(page_size, FakePageSource().fetch)

    def test_page_size_must_be_int(self) -> None:
        """Non-integer page sizes are rejected."""
        with pytest.raises(TypeError):
            Stapler(2.5, FakePageSource().fetch)  # type: ignore[arg-type]

    async def test_accepts_typed_fetch_function(self) -> None:
        """A plain coroutine function typed as PageFetcher works as the source."""

        async def fetch(offset: int, size: int) -> PaginatedResponse[str]:
            return PaginatedResponse(items=["only"], total=1)

        typed: PageFetcher[str] = fetch
        assert PageFetcher[str] is not None
        stapler = Stapler[str](3, typed)

        await stapler.initial_load()

        assert stapler.items.value == ("only",)

    def test_next_page_without_load_is_noop(self) -> None:
        """Before any load the total is 0, so there is nothing to fetch."""
        source = FakePageSource()
        stapler = Stapler(5, source.fetch)
        assert stapler.load_next_page_if_needed() is None
        assert source.calls == []


# ---------------------------------------------------------------------------
# Initial load and refresh
# ---------------------------------------------------------------------------


class TestFirstPageLoads:
    """Tests for initial_load() and refresh()."""

    async def test_initial_load_sets_first_page(self) -> None:
        """After initial load: one page, first page's items, server total."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)

        await stapler.initial_load()

        assert source.calls == [(0, 5)]
        assert stapler.pages.value == 1
        assert stapler.items.value == tuple(source.items[:5])
        assert stapler.total.value == 23
        assert stapler.should_show_next_page_activity_indicator.value is True

    async def test_initial_load_with_short_list(self) -> None:
        """A list smaller than one page loads fully and shows no indicator."""
        source = FakePageSource(total=3)
        stapler = Stapler(5, source.fetch)

        await stapler.initial_load()

        assert len(stapler.items.value) == 3
        assert stapler.pages.value == 1
        assert stapler.should_show_next_page_activity_indicator.value is False
        assert stapler.load_next_page_if_needed() is None

    async def test_refresh_resets_to_first_page(self) -> None:
        """Refresh after several pages keeps only the first page."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()
        await stapler.load_next_page_if_needed()
        await stapler.load_next_page_if_needed()
        assert stapler.pages.value == 3

        await stapler.refresh()

        assert stapler.pages.value == 1
        assert stapler.items.value == tuple(source.items[:5])
        assert source.calls[-1] == (0, 5)

    async def test_refresh_picks_up_new_total(self) -> None:
        """The server total is overwritten on every successful fetch."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()

        source.items.extend(["late-1", "late-2"])
        await stapler.refresh()

        assert stapler.total.value == 25

    async def test_initial_load_failure_keeps_state(self) -> None:
        """A failed initial load raises, records the error, and changes nothing."""
        source = FakePageSource()
        source.fail_offsets.add(0)
        stapler = Stapler(5, source.fetch)
        next_page_errors: list[ResponseError] = []
        stapler.errors_2nd_page_and_later.observe(next_page_errors.append)

        with pytest.raises(ResponseError):
            await stapler.initial_load()

        assert _snapshot(stapler) == ((), 0, 0)
        assert isinstance(stapler.initial_load_action.last_error, ResponseError)
        assert stapler.refresh_action.last_error is None
        assert next_page_errors == []

    async def test_refresh_failure_keeps_loaded_pages(self) -> None:
        """A failed refresh leaves previously loaded pages untouched."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()
        await stapler.load_next_page_if_needed()
        before = _snapshot(stapler)
        refresh_errors: list[ResponseError] = []
        stapler.refresh_action.errors.observe(refresh_errors.append)

        source.fail_offsets.add(0)
        with pytest.raises(ResponseError):
            await stapler.refresh()

        assert _snapshot(stapler) == before
        assert len(refresh_errors) == 1
        assert stapler.initial_load_action.last_error is None

    async def test_refresh_and_initial_load_track_status_separately(self) -> None:
        """Each first-page operation has its own in-flight flag."""
        source = FakePageSource()
        source.gate = asyncio.Event()
        stapler = Stapler(5, source.fetch)

        task = stapler.refresh_action.start()
        assert stapler.refresh_action.is_executing.value is True
        assert stapler.initial_load_action.is_executing.value is False

        source.gate.set()
        await task
        assert stapler.refresh_action.is_executing.value is False

    async def test_overlapping_first_page_loads_last_completion_wins(self) -> None:
        """Overlapping refresh and initial load race; the later completion wins."""
        gates: list[asyncio.Event] = []

        async def fetch(offset: int, size: int) -> PaginatedResponse[str]:
            gate = asyncio.Event()
            gates.append(gate)
            call = len(gates)
            await gate.wait()
            return PaginatedResponse(items=[f"call-{call}"], total=10 * call)

        stapler = Stapler(5, fetch)
        first = stapler.initial_load_action.start()
        second = stapler.refresh_action.start()
        await _drain()
        assert len(gates) == 2

        # Second call completes first, first call completes last
        gates[1].set()
        await second
        gates[0].set()
        await first

        assert stapler.items.value == ("call-1",)
        assert stapler.total.value == 10
        assert stapler.pages.value == 1


# ---------------------------------------------------------------------------
# Next page
# ---------------------------------------------------------------------------


class TestLoadNextPage:
    """Tests for load_next_page_if_needed()."""

    async def test_appends_next_page(self) -> None:
        """A next-page load appends items and requests offset pages*size."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()

        task = stapler.load_next_page_if_needed()
        assert task is not None
        await task

        assert source.calls == [(0, 5), (5, 5)]
        assert stapler.pages.value == 2
        assert stapler.items.value == tuple(source.items[:10])
        assert stapler.next_offset == 10

    async def test_repeated_triggers_start_one_fetch(self) -> None:
        """Many triggers while a next page is in flight start exactly one fetch."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()
        source.gate = asyncio.Event()

        tasks = [stapler.load_next_page_if_needed() for _ in range(10)]
        await _drain()

        started = [task for task in tasks if task is not None]
        assert len(started) == 1
        assert tasks[0] is started[0]
        assert source.calls[1:] == [(5, 5)]

        source.gate.set()
        await started[0]
        assert stapler.pages.value == 2

    async def test_in_flight_flag_set_before_return(self) -> None:
        """The next-page flag is already set when the trigger returns."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()
        source.gate = asyncio.Event()

        task = stapler.load_next_page_if_needed()
        assert stapler.is_loading_next_page.value is True

        source.gate.set()
        await task
        assert stapler.is_loading_next_page.value is False

    async def test_blocked_while_refresh_in_flight(self) -> None:
        """No next-page fetch starts while a refresh is in flight."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()
        source.gate = asyncio.Event()

        refresh_task = stapler.refresh_action.start()
        assert stapler.load_next_page_if_needed() is None

        source.gate.set()
        await refresh_task
        assert source.calls == [(0, 5), (0, 5)]

    async def test_not_blocked_by_initial_load(self) -> None:
        """Only refresh gates next-page loads; an initial load does not."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()
        source.gate = asyncio.Event()

        initial_task = stapler.initial_load_action.start()
        next_task = stapler.load_next_page_if_needed()
        assert next_task is not None

        source.gate.set()
        await asyncio.gather(initial_task, next_task)

    async def test_exhausted_list_is_noop_without_error(self) -> None:
        """With every page loaded the trigger does nothing and reports nothing."""
        source = FakePageSource(total=10)
        stapler = Stapler(5, source.fetch)
        errors: list[ResponseError] = []
        stapler.errors_2nd_page_and_later.observe(errors.append)
        await stapler.initial_load()
        await _load_all(stapler)
        calls_before = list(source.calls)
        before = _snapshot(stapler)

        assert stapler.load_next_page_if_needed() is None

        assert source.calls == calls_before
        assert _snapshot(stapler) == before
        assert errors == []

    async def test_loading_all_pages(self) -> None:
        """After exhausting pages all items are loaded and the indicator is off."""
        source = FakePageSource(total=17)
        stapler = Stapler(4, source.fetch)
        await stapler.initial_load()

        await _load_all(stapler)

        assert len(stapler.items.value) == stapler.total.value == 17
        assert stapler.pages.value == 5
        assert stapler.should_show_next_page_activity_indicator.value is False

    async def test_failure_keeps_state_and_reports_once(self) -> None:
        """A failed next page changes nothing and sends one error."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        errors: list[ResponseError] = []
        stapler.errors_2nd_page_and_later.observe(errors.append)
        await stapler.initial_load()
        before = _snapshot(stapler)

        source.fail_offsets.add(5)
        task = stapler.load_next_page_if_needed()
        assert task is not None
        assert await task is None

        assert _snapshot(stapler) == before
        assert len(errors) == 1
        assert "offset 5" in str(errors[0])
        assert stapler.initial_load_action.last_error is None
        assert stapler.is_loading_next_page.value is False

    async def test_retry_after_failure_requests_same_offset(self) -> None:
        """After a failure the next trigger asks for the same page again."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()
        source.fail_offsets.add(5)
        await stapler.load_next_page_if_needed()

        source.fail_offsets.clear()
        await stapler.load_next_page_if_needed()

        assert source.calls[1:] == [(5, 5), (5, 5)]
        assert stapler.pages.value == 2

    async def test_oversized_page_is_rejected(self) -> None:
        """A page with more items than requested is routed as an error."""

        async def fetch(offset: int, size: int) -> PaginatedResponse[str]:
            count = size if offset == 0 else size + 1
            return PaginatedResponse(items=["x"] * count, total=50)

        stapler = Stapler(5, fetch)
        errors: list[ResponseError] = []
        stapler.errors_2nd_page_and_later.observe(errors.append)
        await stapler.initial_load()

        await stapler.load_next_page_if_needed()

        assert len(errors) == 1
        assert isinstance(errors[0], PageSizeViolationError)
        assert stapler.pages.value == 1
        assert len(stapler.items.value) == 5

    async def test_item_will_display_triggers_on_last_row(self) -> None:
        """Only displaying the last accumulated item triggers a next page."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        await stapler.initial_load()

        assert stapler.item_will_display(2) is None
        task = stapler.item_will_display(4)
        assert task is not None
        await task
        assert stapler.pages.value == 2


# ---------------------------------------------------------------------------
# Observation
# ---------------------------------------------------------------------------


class TestObservation:
    """Tests for what subscribers see."""

    async def test_observers_see_complete_page_updates(self) -> None:
        """Observers of items already see the matching pages and total."""
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        seen: list[tuple[int, int, int]] = []
        stapler.items.observe(
            lambda items: seen.append(
                (len(items), stapler.pages.value, stapler.total.value)
            ),
            replay=False,
        )

        await stapler.initial_load()
        await stapler.load_next_page_if_needed()

        assert seen == [(5, 1, 23), (10, 2, 23)]

    async def test_indicator_changes_are_published(self) -> None:
        """The activity indicator turns on after page 1 and off at the end."""
        source = FakePageSource(total=8)
        stapler = Stapler(5, source.fetch)
        states: list[bool] = []
        stapler.should_show_next_page_activity_indicator.observe(states.append)

        await stapler.initial_load()
        await _load_all(stapler)

        assert states == [False, True, False]


# ---------------------------------------------------------------------------
# Walkthrough: 23 lines, 5 per page
# ---------------------------------------------------------------------------


class TestLyricsWalkthrough:
    """End-to-end walk through a 23-line list with five lines per page."""

    async def test_full_walkthrough(self) -> None:
        source = FakePageSource(total=23)
        stapler = Stapler(5, source.fetch)
        errors: list[ResponseError] = []
        stapler.errors_2nd_page_and_later.observe(errors.append)

        await stapler.initial_load()
        assert len(stapler.items.value) == 5
        assert stapler.pages.value == 1
        assert stapler.total.value == 23
        assert stapler.should_show_next_page_activity_indicator.value is True

        for _ in range(4):
            task = stapler.load_next_page_if_needed()
            assert task is not None
            await task

        assert stapler.pages.value == 5
        assert len(stapler.items.value) == 23
        assert stapler.should_show_next_page_activity_indicator.value is False

        before = _snapshot(stapler)
        assert stapler.load_next_page_if_needed() is None
        assert _snapshot(stapler) == before
        assert errors == []
        assert [offset for offset, _ in source.calls] == [0, 5, 10, 15, 20]
