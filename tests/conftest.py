"""
Test configuration and fixtures for the link stats service.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from linkstats_app.database.connection import Base
from linkstats_app.dependencies import get_event_log, get_mapping_store
from linkstats_app.exceptions import StorageError
from linkstats_app.storage.strategies import EntityStoreStrategy, InMemoryEntityStore
from linkstats_app.storage.tables import EventLog, MappingStore


@pytest.fixture(scope="function")
def mapping_store():
    """Fresh in-memory Mapping Store for each test"""
    return MappingStore(InMemoryEntityStore("urls"), partition_key="urls")


@pytest.fixture(scope="function")
def event_log():
    """Fresh in-memory Event Log for each test"""
    return EventLog(InMemoryEntityStore("analytics"))


@pytest.fixture(scope="function")
def sql_session_factory():
    """
    SQLAlchemy session factory bound to a private in-memory SQLite database.
    StaticPool keeps the single connection alive across sessions.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import linkstats_app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(mapping_store, event_log):
    """
    Create a test client with the store dependencies overridden.
    This is the main fixture that tests will use.
    """
    app.dependency_overrides[get_mapping_store] = lambda: mapping_store
    app.dependency_overrides[get_event_log] = lambda: event_log

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()


class BrokenEntityStore(EntityStoreStrategy):
    """Entity store whose backend is always down"""

    async def create_record(self, partition_key, row_key, fields):
        raise StorageError("store unavailable")

    async def get_record(self, partition_key, row_key):
        raise StorageError("store unavailable")

    async def list_records(self):
        raise StorageError("store unavailable")


@pytest.fixture
def broken_mapping_store():
    return MappingStore(BrokenEntityStore("urls"))


@pytest.fixture
def broken_event_log():
    return EventLog(BrokenEntityStore("analytics"))
