"""
Invalidation Event Catalog

Every server-managed collection the console caches has exactly one
``EntityKind``. Publishers (write flows) and subscribers (view bindings,
stores) share this enum, so a misspelt kind fails loudly at the call site
instead of silently delivering to nobody.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class EntityKind(str, Enum):
    """Collections cached by the console."""

    DOCTORS = "doctors"
    MESSAGES = "messages"
    APPOINTMENTS = "appointments"

    @classmethod
    def parse(cls, value: "EntityKind | str") -> "EntityKind":
        """
        Coerce a kind or its string value.

        Raises:
            ValueError: If the value names no known collection
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            known = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown entity kind {value!r} (expected one of: {known})") from None


@dataclass(frozen=True)
class InvalidationEvent:
    """
    Signal that a collection changed out of band and should be re-fetched.

    Carries no payload beyond the kind; listeners decide what to reload.
    """

    entity_kind: EntityKind
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def event_type(self) -> str:
        return f"{self.entity_kind.value}.invalidated"

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "entity_kind": self.entity_kind.value,
            "occurred_at": self.occurred_at.isoformat(),
        }
