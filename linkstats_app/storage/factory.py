"""
Factory for creating entity store instances.
Simple, clean factory with per-table singleton caching.
"""

import logging
from enum import Enum
from typing import Dict, Tuple

import redis

from .strategies import EntityStoreStrategy, InMemoryEntityStore, RedisEntityStore, SQLEntityStore
from linkstats_app.config import settings
from linkstats_app.exceptions import StorageError

logger = logging.getLogger(__name__)


class EntityStoreBackend(Enum):
    """Available entity store backends"""
    MEMORY = "memory"
    SQL = "sql"
    REDIS = "redis"


class EntityStoreFactory:
    """
    Simple factory for creating entity store instances.

    Gets configuration from settings (not passed as parameters).
    One instance is cached per (backend, table name).
    """

    _instances: Dict[Tuple[EntityStoreBackend, str], EntityStoreStrategy] = {}

    @classmethod
    def create(cls, backend: EntityStoreBackend, table_name: str) -> EntityStoreStrategy:
        """
        Create or return cached entity store for a table.

        Args:
            backend: Type of store backend (from enum)
            table_name: Logical table served by the store

        Returns:
            Singleton store instance for that table

        Raises:
            StorageError: Redis backend selected but unreachable
        """
        cache_key = (backend, table_name)
        if cache_key in cls._instances:
            return cls._instances[cache_key]

        if backend == EntityStoreBackend.MEMORY:
            instance = InMemoryEntityStore(table_name)

        elif backend == EntityStoreBackend.SQL:
            from linkstats_app.database.connection import Base, engine
            import linkstats_app.models  # noqa: F401  registers EntityRecord

            Base.metadata.create_all(bind=engine)
            instance = SQLEntityStore(table_name)

        elif backend == EntityStoreBackend.REDIS:
            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=False,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                # Test connection immediately
                redis_client.ping()
            except redis.RedisError as e:
                # No in-memory fallback: links written there would vanish on restart
                raise StorageError(f"Redis connection failed: {e}") from e
            instance = RedisEntityStore(redis_client, table_name, namespace=settings.redis_namespace)

        else:
            raise ValueError(f"Unknown entity store backend: {backend}")

        logger.info("%s entity store initialized for table '%s'", backend.value, table_name)
        cls._instances[cache_key] = instance
        return instance

    @classmethod
    def clear_instances(cls):
        """Clear cached instances (for testing)"""
        cls._instances = {}
