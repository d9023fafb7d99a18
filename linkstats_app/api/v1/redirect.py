from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import Response
from linkstats_app.schemas.link import ClickEvent
from linkstats_app.services.link_service import LinkService
from linkstats_app.dependencies import get_link_service
from linkstats_app.config import settings

router = APIRouter(tags=["redirect"])


@router.get("/{slug}")
async def redirect_to_target_url(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Redirect to the original URL.

    Flow:
    1. Look up the mapping (404 if the slug is unknown)
    2. Record the click, best effort
    3. Redirect with 302

    In "background" mode the click is written after the response has been
    sent, so the visitor never waits on the Event Log. In "inline" mode it is
    written first. Either way a failed write only loses the analytics record.
    """
    link = await link_service.get_short_link(slug)

    click_event = ClickEvent(
        slug=slug,
        referrer=request.headers.get("referer"),
        user_agent=request.headers.get("user-agent"),
    )

    if settings.click_recording == "inline":
        await link_service.record_click(click_event)
    else:
        background_tasks.add_task(link_service.record_click, click_event)

    # Location is sent verbatim (RedirectResponse would re-quote it)
    return Response(status_code=status.HTTP_302_FOUND, headers={"location": link.target_url})
