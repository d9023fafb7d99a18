import logging
from typing import Optional

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from linkstats_app.config import settings
from linkstats_app.exceptions import (
    NotFoundError,
    RecordExistsError,
    SlugConflictError,
    StorageError,
    ValidationError,
)
from linkstats_app.schemas.link import ClickEvent, ShortLink
from linkstats_app.services.slug_generator import RandomSlugGenerator, is_valid_custom_slug
from linkstats_app.storage.tables import EventLog, MappingStore

logger = logging.getLogger(__name__)

_http_url = TypeAdapter(AnyHttpUrl)


def is_header_safe(url: str) -> bool:
    """True if the URL can go into a Location header byte-for-byte"""
    return all(0x21 <= ord(ch) <= 0x7e for ch in url)


class LinkService:
    """
    Link service with dependency injection for both collections.

    The stores are injected (not created internally), so tests can hand in
    in-memory stores and production gets whatever backend is configured.
    """

    def __init__(
        self,
        mapping_store: MappingStore,
        event_log: EventLog,
        slug_generator: Optional[RandomSlugGenerator] = None
    ):
        self.mapping_store = mapping_store
        self.event_log = event_log
        self.slug_generator = slug_generator or RandomSlugGenerator(length=settings.slug_length)

    async def create_short_link(self, target_url: Optional[str], custom_slug: Optional[str] = None) -> ShortLink:
        """Create a new short link

        Note: Always creates a new mapping even if the target URL already has
        one, so different campaigns can point at the same destination.

        The target URL is validated but stored exactly as submitted.

        Raises:
            ValidationError: url missing, not an absolute http(s) URL or not printable
                ASCII, or custom slug not usable as a path segment
            SlugConflictError: custom slug already taken
            StorageError: store failure, or no free random slug found
        """
        if not target_url or not target_url.strip():
            raise ValidationError("URL is required")
        try:
            _http_url.validate_python(target_url)
        except SchemaValidationError:
            raise ValidationError(f"Invalid URL: {target_url}")
        if not is_header_safe(target_url):
            raise ValidationError("URL must be ASCII without spaces or control characters")

        if custom_slug:
            if not is_valid_custom_slug(custom_slug, max_length=settings.custom_slug_max_length):
                raise ValidationError(f"Invalid custom slug: {custom_slug}")
            link = ShortLink(slug=custom_slug, target_url=target_url)
            try:
                await self.mapping_store.add(link)
            except RecordExistsError:
                raise SlugConflictError(f"Slug '{custom_slug}' already exists")
            logger.info("Created short link %s -> %s", link.slug, link.target_url)
            return link

        for attempt in range(settings.slug_max_retries):
            link = ShortLink(slug=self.slug_generator.generate(), target_url=target_url)
            try:
                await self.mapping_store.add(link)
            except RecordExistsError:
                logger.warning("Slug collision on '%s' (attempt %d)", link.slug, attempt + 1)
                continue
            logger.info("Created short link %s -> %s", link.slug, link.target_url)
            return link

        raise StorageError(
            f"Could not generate unique slug after {settings.slug_max_retries} attempts"
        )

    async def get_short_link(self, slug: str) -> ShortLink:
        """Look up a mapping; raises NotFoundError if the slug is unknown"""
        link = await self.mapping_store.get(slug)
        if link is None:
            raise NotFoundError()
        return link

    async def record_click(self, event: ClickEvent) -> bool:
        """
        Append a click to the Event Log, best effort.

        A store failure is logged and swallowed: losing one analytics record
        must never break the redirect it belongs to.

        Returns:
            True if the event was stored
        """
        try:
            await self.event_log.append(event)
            return True
        except StorageError as e:
            logger.error("Dropped click event for '%s': %s", event.slug, e)
            return False
