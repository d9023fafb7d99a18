"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the Mapping Store and the
Event Log, and builds the services that routes depend on.

Pattern: Dependency Injection
- Store handles are created once per process
- Tests override get_mapping_store / get_event_log with in-memory stores
"""

from functools import lru_cache

from fastapi import Depends

from linkstats_app.config import settings
from linkstats_app.services.analytics_service import AnalyticsService
from linkstats_app.services.link_service import LinkService
from linkstats_app.storage.factory import EntityStoreBackend, EntityStoreFactory
from linkstats_app.storage.tables import EventLog, MappingStore


@lru_cache()
def get_mapping_store() -> MappingStore:
    """
    Get the Mapping Store (singleton).

    Backend comes from settings; @lru_cache ensures this is built only once.
    """
    backend = EntityStoreBackend(settings.entity_store_backend)
    table = EntityStoreFactory.create(backend, settings.mapping_table)
    return MappingStore(table, partition_key=settings.mapping_partition)


@lru_cache()
def get_event_log() -> EventLog:
    """Get the Event Log (singleton)."""
    backend = EntityStoreBackend(settings.entity_store_backend)
    return EventLog(EntityStoreFactory.create(backend, settings.event_table))


def get_link_service(
    mapping_store: MappingStore = Depends(get_mapping_store),
    event_log: EventLog = Depends(get_event_log)
) -> LinkService:
    """Get LinkService with both collections injected."""
    return LinkService(mapping_store=mapping_store, event_log=event_log)


def get_analytics_service(event_log: EventLog = Depends(get_event_log)) -> AnalyticsService:
    return AnalyticsService(event_log=event_log)
