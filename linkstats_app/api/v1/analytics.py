from fastapi import APIRouter, Depends
from linkstats_app.schemas.analytics import AnalyticsSummary
from linkstats_app.services.analytics_service import AnalyticsService
from linkstats_app.dependencies import get_analytics_service

router = APIRouter(tags=["analytics"])


@router.get("/analytics", response_model=AnalyticsSummary)
async def get_analytics_summary(
    analytics_service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Click series by date, top referrers and total clicks.

    Computed from a full scan of the Event Log on every request.
    """
    return await analytics_service.get_summary()
