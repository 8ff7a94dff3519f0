"""Observable wrapper around a repeatable async unit of work.

An :class:`Action` tracks how many of its executions are in flight and
routes :class:`~src.stapler.services.page_source.ResponseError` failures to
its own error channel. It does not refuse overlapping executions; callers
that need a single-flight guard check ``is_executing`` and call
:meth:`Action.start` in the same synchronous step.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from src.stapler.domain.operation import (
    OperationKind,
    OperationState,
    OperationStatus,
)
from src.stapler.services.page_source import ResponseError
from src.stapler.utils.observable import MutableProperty, Property, Signal

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Action(Generic[T]):
    """Async operation with in-flight status and an error channel.

    Args:
        kind: Which controller operation this action implements
        work: Coroutine function performing one execution
    """

    def __init__(
        self,
        kind: OperationKind,
        work: Callable[..., Awaitable[T]],
    ) -> None:
        self._kind = kind
        self._work = work
        self._state: MutableProperty[OperationState] = MutableProperty(
            OperationState()
        )
        self._is_executing = self._state.map(lambda state: state.is_in_flight)
        self._values: Signal[T] = Signal()
        self._errors: Signal[ResponseError] = Signal()
        # Strong references so scheduled executions are not collected mid-flight
        self._tasks: set[asyncio.Task[T | None]] = set()

    @property
    def kind(self) -> OperationKind:
        return self._kind

    @property
    def state(self) -> Property[OperationState]:
        return self._state

    @property
    def is_executing(self) -> Property[bool]:
        return self._is_executing

    @property
    def values(self) -> Signal[T]:
        """Results of successful executions."""
        return self._values

    @property
    def errors(self) -> Signal[ResponseError]:
        """Errors of failed executions."""
        return self._errors

    @property
    def running_tasks(self) -> frozenset["asyncio.Task[T | None]"]:
        """Tasks scheduled by ``start()`` that have not finished yet."""
        return frozenset(self._tasks)

    @property
    def last_error(self) -> Exception | None:
        return self._state.value.last_error

    async def apply(self, *args: Any) -> T:
        """Execute and wait for the result.

        Raises:
            ResponseError: If the work fails; the error is also sent on
                ``errors`` before being re-raised
        """
        self._begin()
        return await self._run(*args)

    def start(self, *args: Any) -> "asyncio.Task[T | None]":
        """Mark the action in flight and schedule it on the running loop.

        The in-flight status is updated before this method returns, so a
        guard evaluated right after sees the execution. A ``ResponseError``
        is delivered only through ``errors``; the returned task then
        resolves to ``None``.

        Raises:
            RuntimeError: If called without a running event loop
        """
        loop = asyncio.get_running_loop()
        self._begin()
        task = loop.create_task(self._run_routed(*args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_routed(self, *args: Any) -> T | None:
        try:
            return await self._run(*args)
        except ResponseError:
            # Already delivered on the error channel
            return None

    async def _run(self, *args: Any) -> T:
        try:
            value = await self._work(*args)
        except ResponseError as exc:
            self._finish(error=exc)
            logger.warning("%s failed: %s", self._kind.value, exc)
            self._errors.send(exc)
            raise
        except BaseException:
            self._finish(error=None)
            raise
        self._finish(error=None)
        self._values.send(value)
        return value

    def _begin(self) -> None:
        count = self._state.value.in_flight_count + 1
        if count > 1:
            logger.debug(
                "%s started while %d execution(s) in flight",
                self._kind.value,
                count - 1,
            )
        self._state.value = OperationState(
            status=OperationStatus.IN_FLIGHT,
            in_flight_count=count,
        )

    def _finish(self, error: Exception | None) -> None:
        previous = self._state.value
        count = max(previous.in_flight_count - 1, 0)
        self._state.value = OperationState(
            status=OperationStatus.IN_FLIGHT if count else OperationStatus.IDLE,
            in_flight_count=count,
            last_error=error if error is not None else previous.last_error,
        )
