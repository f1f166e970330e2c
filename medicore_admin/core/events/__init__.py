from .invalidation_bus import InvalidationBus, InvalidationListener
from .subscription import ListenerRegistry, Subscription

__all__ = [
    "InvalidationBus",
    "InvalidationListener",
    "ListenerRegistry",
    "Subscription",
]
