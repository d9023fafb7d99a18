"""
The two logical collections built on top of an entity store.

MappingStore: slug → target URL, all links in one partition, row key = slug.
EventLog: click events, partitioned by slug, row key = event timestamp.
"""

import logging
import secrets
from typing import List, Optional

from pydantic import ValidationError as SchemaValidationError

from linkstats_app.schemas.link import ClickEvent, ShortLink
from .strategies import PARTITION_KEY, EntityStoreStrategy

logger = logging.getLogger(__name__)


class MappingStore:
    def __init__(self, table: EntityStoreStrategy, partition_key: str = "urls"):
        self.table = table
        self.partition_key = partition_key

    async def add(self, link: ShortLink) -> None:
        """Write a new mapping; raises RecordExistsError if the slug is taken"""
        await self.table.create_record(
            self.partition_key,
            link.slug,
            {"url": link.target_url, "createdAt": link.created_at.isoformat()},
        )

    async def get(self, slug: str) -> Optional[ShortLink]:
        entity = await self.table.get_record(self.partition_key, slug)
        if entity is None:
            return None
        return ShortLink(slug=slug, target_url=entity["url"], created_at=entity["createdAt"])


class EventLog:
    def __init__(self, table: EntityStoreStrategy):
        self.table = table

    @staticmethod
    def row_key_for(event: ClickEvent) -> str:
        # Suffix keeps two clicks in the same microsecond from sharing a key
        return f"{event.timestamp.isoformat()}-{secrets.token_hex(4)}"

    async def append(self, event: ClickEvent) -> str:
        row_key = self.row_key_for(event)
        await self.table.create_record(
            event.slug,
            row_key,
            {
                "timestamp": event.timestamp.isoformat(),
                "referrer": event.referrer or "",
                "userAgent": event.user_agent or "",
            },
        )
        return row_key

    async def list_all(self) -> List[ClickEvent]:
        """Every stored event; records that no longer parse are skipped"""
        events = []
        for entity in await self.table.list_records():
            try:
                events.append(ClickEvent(
                    slug=entity[PARTITION_KEY],
                    timestamp=entity.get("timestamp"),
                    referrer=entity.get("referrer") or None,
                    user_agent=entity.get("userAgent") or None,
                ))
            except SchemaValidationError as e:
                logger.warning("Skipping malformed click event %s: %s", entity.get("rowKey"), e)
        return events
