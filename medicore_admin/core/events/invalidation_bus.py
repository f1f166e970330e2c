# ============================================================================
# SCOPE: GLOBAL
# Description: Process-wide publish/subscribe channel for collection
#              invalidation. Synchronous delivery, no payload.
# ============================================================================
"""
Invalidation Bus

Tells every interested view binding that a collection changed out of band
(a create/update/delete performed elsewhere) and a re-fetch is due.

Features:
- Synchronous delivery on the publishing call, in registration order
- Per-kind and wildcard listeners
- Listener failures are logged and isolated; ``publish`` never raises
- Safe against listeners that unsubscribe themselves during delivery

Usage:
    bus = InvalidationBus()
    subscription = bus.subscribe(EntityKind.DOCTORS, lambda event: schedule_refresh())
    ...
    bus.publish(EntityKind.DOCTORS)   # after a successful "add doctor"
    subscription.cancel()              # on unmount
"""

import logging
from collections.abc import Callable
from typing import Any

from medicore_admin.core.domain.events import EntityKind, InvalidationEvent

from .subscription import ListenerRegistry, Subscription

logger = logging.getLogger(__name__)

InvalidationListener = Callable[[InvalidationEvent], Any]

# Registry key for wildcard listeners
_ALL_KINDS = None


class InvalidationBus:
    """In-process invalidation channel keyed by ``EntityKind``."""

    def __init__(self) -> None:
        self._registry: ListenerRegistry[InvalidationEvent] = ListenerRegistry("Invalidation")
        self._published = 0

    def subscribe(self, kind: EntityKind | str, listener: InvalidationListener) -> Subscription[InvalidationEvent]:
        """
        Register a listener for one collection.

        Args:
            kind: Collection to listen to
            listener: Called synchronously with the InvalidationEvent

        Returns:
            Subscription; cancel it (or pass it to ``unsubscribe``) on unmount
        """
        entity_kind = EntityKind.parse(kind)
        subscription = self._registry.add(listener, key=entity_kind)
        logger.debug(f"Subscribed listener #{subscription.id} to {entity_kind.value}")
        return subscription

    def subscribe_all(self, listener: InvalidationListener) -> Subscription[InvalidationEvent]:
        """Register a wildcard listener that receives every invalidation."""
        subscription = self._registry.add(listener, key=_ALL_KINDS)
        logger.debug(f"Subscribed wildcard listener #{subscription.id}")
        return subscription

    def unsubscribe(self, subscription: Subscription[InvalidationEvent]) -> bool:
        """Remove exactly this registration; returns False if it was already removed."""
        removed = self._registry.remove(subscription)
        if removed:
            logger.debug(f"Unsubscribed listener #{subscription.id}")
        return removed

    def publish(self, kind: EntityKind | str) -> InvalidationEvent:
        """
        Deliver an invalidation for ``kind`` to its listeners and wildcard listeners.

        Raises:
            ValueError: If ``kind`` is not a known collection (nothing is delivered)
        """
        entity_kind = EntityKind.parse(kind)
        event = InvalidationEvent(entity_kind=entity_kind)
        delivered, failed = self._registry.deliver(
            event,
            lambda s: s.key is _ALL_KINDS or s.key is entity_kind,
        )
        self._published += 1

        if failed:
            logger.warning(f"Invalidation of {entity_kind.value}: {failed} listener(s) failed, {delivered} delivered")
        else:
            logger.debug(f"Invalidation of {entity_kind.value} delivered to {delivered} listener(s)")
        return event

    def listener_count(self, kind: EntityKind | str | None = None) -> int:
        """Count registrations for ``kind`` (excluding wildcards), or all when None."""
        if kind is None:
            return len(self._registry)
        entity_kind = EntityKind.parse(kind)
        return len(self._registry.matching(lambda s: s.key is entity_kind))

    @property
    def published_count(self) -> int:
        return self._published

    def clear(self) -> None:
        """Remove every listener (useful for testing)."""
        self._registry.clear()
