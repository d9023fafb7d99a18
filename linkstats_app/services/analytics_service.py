"""
Click analytics aggregation.

Recomputes the summary from the raw Event Log on every call: one linear
pass to count per date and per referrer, then two small sorts. Fine for
small event volumes; there is no pre-aggregation.
"""

from collections import Counter
from datetime import date, datetime, timezone
from typing import Iterable

from linkstats_app.config import settings
from linkstats_app.schemas.analytics import AnalyticsSummary, DateCount, ReferrerCount
from linkstats_app.schemas.link import ClickEvent
from linkstats_app.storage.tables import EventLog


def click_date(timestamp: datetime) -> date:
    """Calendar date of a click in UTC (naive timestamps are taken as UTC)"""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.date()


def summarize_clicks(
    events: Iterable[ClickEvent],
    top_n: int = 5,
    direct_label: str = "Direct"
) -> AnalyticsSummary:
    """
    Aggregate click events into a per-date series and a referrer ranking.

    Args:
        events: Click events in any order
        top_n: Maximum number of referrers to keep
        direct_label: Referrer name used for clicks without a referrer

    Returns:
        AnalyticsSummary with dates ascending and referrers by count
        descending (ties by name, so the output does not depend on scan order)
    """
    by_date: Counter = Counter()
    by_referrer: Counter = Counter()
    total = 0

    for event in events:
        total += 1
        by_date[click_date(event.timestamp)] += 1
        by_referrer[event.referrer or direct_label] += 1

    clicks = [DateCount(date=day, count=count) for day, count in sorted(by_date.items())]
    ranked = sorted(by_referrer.items(), key=lambda item: (-item[1], item[0]))
    top_referrers = [ReferrerCount(referrer=name, count=count) for name, count in ranked[:top_n]]

    return AnalyticsSummary(clicks=clicks, top_referrers=top_referrers, total_clicks=total)


class AnalyticsService:
    def __init__(self, event_log: EventLog):
        self.event_log = event_log

    async def get_summary(self) -> AnalyticsSummary:
        """Full scan of the Event Log; StorageError propagates to the caller"""
        events = await self.event_log.list_all()
        return summarize_clicks(
            events,
            top_n=settings.top_referrers_limit,
            direct_label=settings.direct_referrer_label,
        )
