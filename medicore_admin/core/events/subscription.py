"""
Listener registrations shared by the bus, the session controller and stores.
"""

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ids = itertools.count(1)


@dataclass(eq=False)
class Subscription(Generic[T]):
    """
    One registration of one listener.

    Registering the same callable twice yields two subscriptions; cancelling
    one leaves the other in place.
    """

    listener: Callable[[T], Any]
    key: Any = None
    id: int = field(default_factory=lambda: next(_ids))
    active: bool = True
    _registry: "ListenerRegistry[T] | None" = field(default=None, repr=False)

    def cancel(self) -> None:
        if self._registry is not None:
            self._registry.remove(self)
        self.active = False


class ListenerRegistry(Generic[T]):
    """
    Ordered listener list with isolated, snapshot-based delivery.

    Delivery iterates over a copy taken when it starts, so listeners may
    (un)subscribe while being called. A subscription cancelled before its
    turn is skipped.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._subscriptions: list[Subscription[T]] = []

    def add(self, listener: Callable[[T], Any], key: Any = None) -> Subscription[T]:
        if not callable(listener):
            raise TypeError(f"{self._name} listener must be callable, got {type(listener).__name__}")
        subscription: Subscription[T] = Subscription(listener=listener, key=key, _registry=self)
        self._subscriptions.append(subscription)
        return subscription

    def remove(self, subscription: Subscription[T]) -> bool:
        subscription.active = False
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            return False
        return True

    def matching(self, predicate: Callable[[Subscription[T]], bool] | None = None) -> list[Subscription[T]]:
        if predicate is None:
            return list(self._subscriptions)
        return [s for s in self._subscriptions if predicate(s)]

    def deliver(
        self,
        payload: T,
        predicate: Callable[[Subscription[T]], bool] | None = None,
    ) -> tuple[int, int]:
        """
        Call every matching listener with ``payload``.

        Returns:
            (delivered, failed) counts
        """
        delivered = failed = 0
        for subscription in self.matching(predicate):
            if not subscription.active:
                continue
            try:
                subscription.listener(payload)
                delivered += 1
            except Exception:
                failed += 1
                logger.exception(
                    f"{self._name} listener {getattr(subscription.listener, '__qualname__', subscription.listener)!r} failed"
                )
        return delivered, failed

    def clear(self) -> None:
        for subscription in self._subscriptions:
            subscription.active = False
        self._subscriptions.clear()

    def __len__(self) -> int:
        return len(self._subscriptions)
