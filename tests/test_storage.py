"""
Tests for the entity store strategies and the collections built on them.
"""
import asyncio
from datetime import datetime, timezone

import fakeredis
import pytest

from linkstats_app.database import connection
from linkstats_app.exceptions import RecordExistsError, StorageError
from linkstats_app.schemas.link import ClickEvent, ShortLink
from linkstats_app.storage.factory import EntityStoreBackend, EntityStoreFactory
from linkstats_app.storage import factory
from linkstats_app.storage.strategies import InMemoryEntityStore, RedisEntityStore, SQLEntityStore
from linkstats_app.storage.tables import EventLog, MappingStore


@pytest.fixture(params=["memory", "sql", "redis"])
def make_store(request, sql_session_factory):
    """Builds entity stores for one backend; all tables share that backend"""
    if request.param == "memory":
        return InMemoryEntityStore
    if request.param == "redis":
        redis_client = fakeredis.FakeRedis(server=fakeredis.FakeServer())
        return lambda table_name: RedisEntityStore(redis_client, table_name, namespace="test")
    return lambda table_name: SQLEntityStore(table_name, session_factory=sql_session_factory)


class TestEntityStore:

    def test_create_and_get(self, make_store):
        store = make_store("urls")

        asyncio.run(store.create_record("urls", "abc123", {"url": "https://example.com/"}))
        entity = asyncio.run(store.get_record("urls", "abc123"))

        assert entity == {"partitionKey": "urls", "rowKey": "abc123", "url": "https://example.com/"}

    def test_get_missing(self, make_store):
        store = make_store("urls")
        assert asyncio.run(store.get_record("urls", "missing")) is None

    def test_create_never_overwrites(self, make_store):
        store = make_store("urls")
        asyncio.run(store.create_record("urls", "abc123", {"url": "https://first.example.com/"}))

        with pytest.raises(RecordExistsError):
            asyncio.run(store.create_record("urls", "abc123", {"url": "https://second.example.com/"}))

        entity = asyncio.run(store.get_record("urls", "abc123"))
        assert entity["url"] == "https://first.example.com/"

    def test_same_row_key_in_other_partition(self, make_store):
        store = make_store("analytics")

        asyncio.run(store.create_record("slug1", "2025-03-01T00:00:00", {}))
        asyncio.run(store.create_record("slug2", "2025-03-01T00:00:00", {}))

        assert len(asyncio.run(store.list_records())) == 2

    def test_tables_are_isolated(self, make_store):
        urls = make_store("urls")
        analytics = make_store("analytics")

        asyncio.run(urls.create_record("urls", "abc123", {"url": "https://example.com/"}))

        assert asyncio.run(analytics.list_records()) == []
        assert len(asyncio.run(urls.list_records())) == 1


class TestMappingStore:

    def test_add_and_get(self, make_store):
        mapping_store = MappingStore(make_store("urls"))
        link = ShortLink(slug="promo1", target_url="https://example.com/a?b=c")

        asyncio.run(mapping_store.add(link))
        stored = asyncio.run(mapping_store.get("promo1"))

        assert stored.target_url == "https://example.com/a?b=c"
        assert stored.created_at == link.created_at

    def test_get_unknown(self, make_store):
        assert asyncio.run(MappingStore(make_store("urls")).get("nope")) is None


class TestEventLog:

    def test_append_and_list(self, make_store):
        event_log = EventLog(make_store("analytics"))
        event = ClickEvent(slug="abc123", referrer="https://t.co/", user_agent="curl/8.0")

        asyncio.run(event_log.append(event))
        events = asyncio.run(event_log.list_all())

        assert len(events) == 1
        assert events[0].slug == "abc123"
        assert events[0].timestamp == event.timestamp
        assert events[0].referrer == "https://t.co/"
        assert events[0].user_agent == "curl/8.0"

    def test_same_instant_clicks_both_kept(self, make_store):
        event_log = EventLog(make_store("analytics"))
        when = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

        asyncio.run(event_log.append(ClickEvent(slug="abc123", timestamp=when)))
        asyncio.run(event_log.append(ClickEvent(slug="abc123", timestamp=when)))

        assert len(asyncio.run(event_log.list_all())) == 2

    def test_empty_referrer_reads_back_as_none(self, make_store):
        event_log = EventLog(make_store("analytics"))

        asyncio.run(event_log.append(ClickEvent(slug="abc123")))

        assert asyncio.run(event_log.list_all())[0].referrer is None

    def test_malformed_record_skipped(self, make_store):
        table = make_store("analytics")
        event_log = EventLog(table)

        asyncio.run(table.create_record("abc123", "garbage", {"timestamp": "not a date"}))
        asyncio.run(event_log.append(ClickEvent(slug="abc123")))

        assert len(asyncio.run(event_log.list_all())) == 1


class TestEntityStoreFactory:

    def setup_method(self):
        EntityStoreFactory.clear_instances()

    def teardown_method(self):
        EntityStoreFactory.clear_instances()

    def test_creates_memory_store(self):
        store = EntityStoreFactory.create(EntityStoreBackend.MEMORY, "urls")
        assert isinstance(store, InMemoryEntityStore)
        assert store.table_name == "urls"

    def test_caches_per_table(self):
        urls = EntityStoreFactory.create(EntityStoreBackend.MEMORY, "urls")
        again = EntityStoreFactory.create(EntityStoreBackend.MEMORY, "urls")
        analytics = EntityStoreFactory.create(EntityStoreBackend.MEMORY, "analytics")

        assert urls is again
        assert urls is not analytics

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            EntityStoreBackend("cassandra")

    def test_caches_per_backend(self, monkeypatch, sql_session_factory):
        monkeypatch.setattr(connection, "engine", sql_session_factory.kw["bind"])

        memory = EntityStoreFactory.create(EntityStoreBackend.MEMORY, "urls")
        sql = EntityStoreFactory.create(EntityStoreBackend.SQL, "urls")

        assert isinstance(memory, InMemoryEntityStore)
        assert isinstance(sql, SQLEntityStore)

    def test_creates_redis_store(self, monkeypatch):
        monkeypatch.setattr(factory.redis, "from_url", lambda *args, **kwargs: fakeredis.FakeRedis(server=fakeredis.FakeServer()))

        store = EntityStoreFactory.create(EntityStoreBackend.REDIS, "urls")

        assert isinstance(store, RedisEntityStore)
        assert store.prefix.endswith(":urls:")

    def test_unreachable_redis(self, monkeypatch):
        server = fakeredis.FakeServer()
        server.connected = False
        monkeypatch.setattr(factory.redis, "from_url", lambda *args, **kwargs: fakeredis.FakeRedis(server=server))

        with pytest.raises(StorageError):
            EntityStoreFactory.create(EntityStoreBackend.REDIS, "urls")


class TestRedisEntityStore:
    """Redis-specific behaviour on top of the shared store tests"""

    def test_connection_errors_become_storage_errors(self):
        server = fakeredis.FakeServer()
        server.connected = False
        store = RedisEntityStore(fakeredis.FakeRedis(server=server), "urls")

        with pytest.raises(StorageError):
            asyncio.run(store.create_record("urls", "abc123", {}))
        with pytest.raises(StorageError):
            asyncio.run(store.get_record("urls", "abc123"))
        with pytest.raises(StorageError):
            asyncio.run(store.list_records())

    def test_corrupt_value_on_get(self):
        redis_client = fakeredis.FakeRedis(server=fakeredis.FakeServer())
        store = RedisEntityStore(redis_client, "urls", namespace="test")
        redis_client.set("test:urls:urls:abc123", b"{not json")

        with pytest.raises(StorageError):
            asyncio.run(store.get_record("urls", "abc123"))

    def test_corrupt_value_skipped_on_scan(self):
        redis_client = fakeredis.FakeRedis(server=fakeredis.FakeServer())
        store = RedisEntityStore(redis_client, "urls", namespace="test")
        asyncio.run(store.create_record("urls", "good", {"url": "https://example.com/"}))
        redis_client.set("test:urls:urls:bad", b"{not json")

        records = asyncio.run(store.list_records())

        assert [r["rowKey"] for r in records] == ["good"]

    def test_scan_spans_several_batches(self, monkeypatch):
        store = RedisEntityStore(fakeredis.FakeRedis(server=fakeredis.FakeServer()), "analytics", namespace="test")
        monkeypatch.setattr(RedisEntityStore, "SCAN_BATCH", 3)

        for i in range(7):
            asyncio.run(store.create_record("abc123", f"row{i}", {"n": i}))

        assert sorted(r["n"] for r in asyncio.run(store.list_records())) == list(range(7))
