from fastapi import APIRouter, Depends
from linkstats_app.schemas.link import ShortenRequest, ShortenResponse, ShortLink
from linkstats_app.services.link_service import LinkService
from linkstats_app.dependencies import get_link_service

router = APIRouter(tags=["links"])


@router.post("/shorten", response_model=ShortenResponse)
async def create_short_link(
    body: ShortenRequest,
    link_service: LinkService = Depends(get_link_service)
):
    """Create a new short link, with a random slug unless customSlug is given"""
    link = await link_service.create_short_link(body.url, body.custom_slug)
    return ShortenResponse(slug=link.slug, short_url=link.short_url)


@router.get("/links/{slug}", response_model=ShortLink)
async def get_short_link(
    slug: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Get the mapping behind a slug without following it"""
    return await link_service.get_short_link(slug)
