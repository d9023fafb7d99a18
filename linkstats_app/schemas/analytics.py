from datetime import date
from typing import List

from pydantic import Field

from linkstats_app.schemas.link import CamelModel


class DateCount(CamelModel):
    click_date: date = Field(..., alias="date")
    count: int


class ReferrerCount(CamelModel):
    referrer: str
    count: int


class AnalyticsSummary(CamelModel):
    """
    Aggregate view over the whole Event Log.

    Derived on every request, never stored.
    """
    clicks: List[DateCount] = Field(default_factory=list)
    top_referrers: List[ReferrerCount] = Field(default_factory=list)
    total_clicks: int = 0
