"""
Entity store strategies using Strategy Pattern.

An entity store is a partitioned key-value table: every record is addressed by
(partition_key, row_key) and carries a dict of JSON-serializable fields.
Allows switching between different backends:
- InMemory: Development/testing
- SQL: SQLAlchemy (SQLite, PostgreSQL, ...)
- Redis: Shared store for several app processes
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

import redis
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from linkstats_app.database.connection import SessionLocal
from linkstats_app.exceptions import RecordExistsError, StorageError
from linkstats_app.models.entity import EntityRecord

logger = logging.getLogger(__name__)

PARTITION_KEY = "partitionKey"
ROW_KEY = "rowKey"


def _as_entity(partition_key: str, row_key: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    entity = dict(fields)
    entity[PARTITION_KEY] = partition_key
    entity[ROW_KEY] = row_key
    return entity


class EntityStoreStrategy(ABC):
    """
    Abstract base class for entity store strategies.

    One instance serves one logical table. Creation never overwrites:
    writing an existing (partition_key, row_key) raises RecordExistsError.
    Every other backend failure is raised as StorageError.

    Pattern: Strategy Pattern
    """

    def __init__(self, table_name: str):
        self.table_name = table_name

    @abstractmethod
    async def create_record(self, partition_key: str, row_key: str, fields: Dict[str, Any]) -> None:
        """
        Create a record if its key is free.

        Args:
            partition_key: Logical group of the record
            row_key: Identifier of the record within its partition
            fields: JSON-serializable record body

        Raises:
            RecordExistsError: The key is already taken
            StorageError: The backend failed
        """
        pass

    @abstractmethod
    async def get_record(self, partition_key: str, row_key: str) -> Optional[Dict[str, Any]]:
        """
        Get one record.

        Returns:
            The stored fields plus partitionKey/rowKey, or None if absent
        """
        pass

    @abstractmethod
    async def list_records(self) -> List[Dict[str, Any]]:
        """Full scan of the table (no filtering, no pagination)"""
        pass


class InMemoryEntityStore(EntityStoreStrategy):
    """
    In-memory entity store backed by a dict.

    Pros:
    - No external services
    - Fast, good for tests

    Cons:
    - Not persistent (lost on restart)
    - Not shared between processes
    """

    def __init__(self, table_name: str):
        super().__init__(table_name)
        self._records: Dict[Tuple[str, str], Dict[str, Any]] = {}
        # Sync routes and background tasks may run in worker threads
        self._lock = threading.Lock()

    async def create_record(self, partition_key: str, row_key: str, fields: Dict[str, Any]) -> None:
        key = (partition_key, row_key)
        with self._lock:
            if key in self._records:
                raise RecordExistsError(
                    f"{self.table_name}: record {partition_key}/{row_key} already exists"
                )
            self._records[key] = dict(fields)

    async def get_record(self, partition_key: str, row_key: str) -> Optional[Dict[str, Any]]:
        fields = self._records.get((partition_key, row_key))
        if fields is None:
            return None
        return _as_entity(partition_key, row_key, fields)

    async def list_records(self) -> List[Dict[str, Any]]:
        with self._lock:
            items = list(self._records.items())
        return [_as_entity(pk, rk, fields) for (pk, rk), fields in items]


class SQLEntityStore(EntityStoreStrategy):
    """
    SQLAlchemy implementation of the entity store.

    All logical tables share the `entities` table; the composite primary key
    (table_name, partition_key, row_key) gives create-if-absent semantics.
    A new session is opened per call, so the store holds no connection state.
    """

    def __init__(self, table_name: str, session_factory: Callable[[], Session] = SessionLocal):
        super().__init__(table_name)
        self.session_factory = session_factory

    async def create_record(self, partition_key: str, row_key: str, fields: Dict[str, Any]) -> None:
        db = self.session_factory()
        try:
            db.add(EntityRecord(
                table_name=self.table_name,
                partition_key=partition_key,
                row_key=row_key,
                fields=dict(fields),
            ))
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise RecordExistsError(
                f"{self.table_name}: record {partition_key}/{row_key} already exists"
            ) from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("SQL create failed for %s/%s/%s: %s", self.table_name, partition_key, row_key, e)
            raise StorageError(f"Failed to write to {self.table_name}") from e
        finally:
            db.close()

    async def get_record(self, partition_key: str, row_key: str) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            record = db.get(EntityRecord, (self.table_name, partition_key, row_key))
            if record is None:
                return None
            return _as_entity(record.partition_key, record.row_key, record.fields or {})
        except SQLAlchemyError as e:
            logger.error("SQL read failed for %s/%s/%s: %s", self.table_name, partition_key, row_key, e)
            raise StorageError(f"Failed to read from {self.table_name}") from e
        finally:
            db.close()

    async def list_records(self) -> List[Dict[str, Any]]:
        db = self.session_factory()
        try:
            records = (
                db.query(EntityRecord)
                .filter(EntityRecord.table_name == self.table_name)
                .order_by(EntityRecord.partition_key, EntityRecord.row_key)
                .all()
            )
            return [_as_entity(r.partition_key, r.row_key, r.fields or {}) for r in records]
        except SQLAlchemyError as e:
            logger.error("SQL scan failed for %s: %s", self.table_name, e)
            raise StorageError(f"Failed to scan {self.table_name}") from e
        finally:
            db.close()


class RedisEntityStore(EntityStoreStrategy):
    """
    Redis implementation of the entity store.

    Each record is one JSON string under `namespace:table:partition:row`.
    SET NX gives create-if-absent; the full scan walks keys with SCAN
    (never KEYS) and fetches values with MGET.
    """

    SCAN_BATCH = 500

    def __init__(self, redis_client, table_name: str, namespace: str = "linkstats"):
        super().__init__(table_name)
        self.redis = redis_client
        self.prefix = f"{namespace}:{table_name}:"

    def _key(self, partition_key: str, row_key: str) -> str:
        return f"{self.prefix}{partition_key}:{row_key}"

    async def create_record(self, partition_key: str, row_key: str, fields: Dict[str, Any]) -> None:
        value = json.dumps(_as_entity(partition_key, row_key, fields))
        try:
            created = self.redis.set(self._key(partition_key, row_key), value, nx=True)
        except redis.RedisError as e:
            logger.error("Redis create failed for %s/%s/%s: %s", self.table_name, partition_key, row_key, e)
            raise StorageError(f"Failed to write to {self.table_name}") from e

        if not created:
            raise RecordExistsError(
                f"{self.table_name}: record {partition_key}/{row_key} already exists"
            )

    async def get_record(self, partition_key: str, row_key: str) -> Optional[Dict[str, Any]]:
        try:
            raw = self.redis.get(self._key(partition_key, row_key))
        except redis.RedisError as e:
            logger.error("Redis read failed for %s/%s/%s: %s", self.table_name, partition_key, row_key, e)
            raise StorageError(f"Failed to read from {self.table_name}") from e
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error("Corrupt Redis value for %s/%s/%s: %s", self.table_name, partition_key, row_key, e)
            raise StorageError(f"Corrupt record in {self.table_name}") from e

    async def list_records(self) -> List[Dict[str, Any]]:
        try:
            keys = list(self.redis.scan_iter(match=f"{self.prefix}*", count=self.SCAN_BATCH))
            records = []
            for start in range(0, len(keys), self.SCAN_BATCH):
                values = self.redis.mget(keys[start:start + self.SCAN_BATCH])
                for key, raw in zip(keys[start:start + self.SCAN_BATCH], values):
                    # A key can expire or vanish between SCAN and MGET
                    if not raw:
                        continue
                    try:
                        records.append(json.loads(raw))
                    except ValueError as e:
                        logger.warning("Skipping corrupt Redis value %s: %s", key, e)
            return records
        except redis.RedisError as e:
            logger.error("Redis scan failed for %s: %s", self.table_name, e)
            raise StorageError(f"Failed to scan {self.table_name}") from e
