from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from linkstats_app.config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(CamelModel):
    """
    Body of POST /shorten.

    Both fields are optional at the schema level so that a missing url is
    reported by the service as a 400, not by FastAPI as a 422.
    """
    url: Optional[str] = Field(None, description="The original URL to be shortened")
    custom_slug: Optional[str] = Field(None, description="Slug to use instead of a random one")


class ShortLink(CamelModel):
    """A slug → target URL mapping as stored in the Mapping Store"""
    slug: str
    target_url: str
    created_at: datetime = Field(default_factory=utc_now)

    @computed_field(alias="shortUrl")
    @property
    def short_url(self) -> str:
        return f"{settings.base_url.rstrip('/')}/{self.slug}"


class ShortenResponse(CamelModel):
    slug: str
    short_url: str


class ClickEvent(CamelModel):
    """
    One redirect event, appended to the Event Log.

    Published for every successful redirect; never updated afterwards.
    """
    slug: str = Field(..., description="The slug that was accessed")
    timestamp: datetime = Field(default_factory=utc_now, description="When the click occurred")
    referrer: Optional[str] = Field(None, description="HTTP referer")
    user_agent: Optional[str] = Field(None, description="User agent string")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "slug": "promo1",
                "timestamp": "2025-10-29T10:30:00+00:00",
                "referrer": "https://twitter.com",
                "userAgent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
            }
        }
    )
