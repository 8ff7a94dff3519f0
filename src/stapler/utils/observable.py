"""Minimal observable primitives for binding consumers to controller state.

Provides a multi-subscriber ``Signal`` and last-value-cached ``Property``
types with synchronous notification. There is no stream algebra beyond
``map`` and ``combine_latest``, which is all the pagination controller
needs to derive its activity indicator.

Thread-safety note: these classes are designed for single-threaded asyncio
use. All sends and assignments must happen on the same event loop.
"""

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class Subscription:
    """Handle returned by ``observe``; call ``dispose()`` to unsubscribe."""

    def __init__(self, on_dispose: Callable[[], None]) -> None:
        self._on_dispose: Callable[[], None] | None = on_dispose

    @property
    def is_disposed(self) -> bool:
        return self._on_dispose is None

    def dispose(self) -> None:
        """Remove the observer. Safe to call more than once."""
        if self._on_dispose is None:
            return
        on_dispose = self._on_dispose
        self._on_dispose = None
        on_dispose()


class Signal(Generic[T]):
    """Multi-subscriber event channel with synchronous delivery.

    Observers are called in subscription order. An observer that raises is
    logged and skipped so that one broken subscriber cannot starve the rest.
    """

    def __init__(self) -> None:
        self._observers: list[Callable[[T], Any]] = []

    def observe(self, observer: Callable[[T], Any]) -> Subscription:
        """Register an observer for every future value."""
        self._observers.append(observer)

        def _remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return Subscription(_remove)

    def send(self, value: T) -> None:
        """Deliver a value to all current observers."""
        # Snapshot so observers may unsubscribe during delivery
        for observer in list(self._observers):
            try:
                observer(value)
            except Exception:
                logger.exception("Observer %r failed handling %r", observer, value)

    @property
    def observer_count(self) -> int:
        return len(self._observers)


class Property(Generic[T]):
    """Read-only view over a value that changes over time.

    Holds the latest value and exposes its changes through ``signal``.
    ``observe`` replays the current value by default, which is what UI
    bindings usually want.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._signal: Signal[T] = Signal()

    @property
    def value(self) -> T:
        return self._value

    @property
    def signal(self) -> Signal[T]:
        """Signal of changes (does not replay the current value)."""
        return self._signal

    def observe(
        self, observer: Callable[[T], Any], *, replay: bool = True
    ) -> Subscription:
        """Subscribe to changes, optionally receiving the current value first.

        The replay runs before subscribing, so an observer that raises on
        the current value propagates the error and is not left subscribed.
        """
        if replay:
            observer(self._value)
        return self._signal.observe(observer)

    def map(self, transform: Callable[[T], U]) -> "Property[U]":
        """Derive a property recomputed on every change of this one."""
        derived = _DerivedProperty(transform(self._value))
        self._signal.observe(lambda value: derived._update(transform(value)))
        return derived

    def combine_latest(self, other: "Property[U]") -> "Property[tuple[T, U]]":
        """Derive a property holding the latest values of both sources."""
        derived = _DerivedProperty((self._value, other.value))
        self._signal.observe(lambda value: derived._update((value, other.value)))
        other.signal.observe(lambda value: derived._update((self._value, value)))
        return derived

    def _set(self, value: T) -> None:
        self._value = value

    def _notify(self) -> None:
        self._signal.send(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class _DerivedProperty(Property[T]):
    """Property whose value is pushed by its sources; skips duplicates."""

    def _update(self, value: T) -> None:
        if value == self._value:
            return
        self._set(value)
        self._notify()


class MutableProperty(Property[T]):
    """Property whose value the owner assigns directly."""

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._set(new_value)
        self._notify()


def commit(*updates: tuple[MutableProperty[Any], Any]) -> None:
    """Assign several properties, then notify observers of each.

    All values are stored before the first observer runs, so any observer
    reading sibling properties sees the complete result of the update.

    Args:
        *updates: ``(property, new_value)`` pairs, notified in the given order
    """
    for prop, new_value in updates:
        prop._set(new_value)
    for prop, _ in updates:
        prop._notify()
