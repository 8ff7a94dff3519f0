# Utils package (observable primitives)

from src.stapler.utils.observable import (
    MutableProperty,
    Property,
    Signal,
    Subscription,
    commit,
)

__all__ = [
    "MutableProperty",
    "Property",
    "Signal",
    "Subscription",
    "commit",
]
