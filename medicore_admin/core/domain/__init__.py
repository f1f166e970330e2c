"""
Console domain primitives: the entity-kind catalog and core exceptions.
"""

from .events import EntityKind, InvalidationEvent
from .exceptions import ConfigurationException, ConsoleException, InvalidOperationException

__all__ = [
    "EntityKind",
    "InvalidationEvent",
    "ConsoleException",
    "InvalidOperationException",
    "ConfigurationException",
]
