"""
Entity storage module.

This module implements the Strategy Pattern for pluggable key-value storage
and the two collections (mappings and click events) stored through it.
"""

from .strategies import EntityStoreStrategy, InMemoryEntityStore, SQLEntityStore, RedisEntityStore
from .factory import EntityStoreFactory, EntityStoreBackend
from .tables import MappingStore, EventLog

__all__ = [
    "EntityStoreStrategy",
    "InMemoryEntityStore",
    "SQLEntityStore",
    "RedisEntityStore",
    "EntityStoreFactory",
    "EntityStoreBackend",
    "MappingStore",
    "EventLog",
]
