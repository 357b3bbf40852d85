"""
SEO endpoints - sitemap, robots.txt and structured data for church websites
"""

from enum import Enum

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from churchflow.core.clock import utcnow
from churchflow.core.config import get_settings
from churchflow.core.database import get_session
from churchflow.core.errors import NotFound
from churchflow.models import Church, Event, WebPage
from churchflow.services.seo import (
    collect_urls,
    events_schema,
    organization_schema,
    place_of_worship_schema,
    render_robots,
    render_sitemap,
    site_base_url,
)

router = APIRouter()
settings = get_settings()


class StructuredDataType(str, Enum):
    ORGANIZATION = "organization"
    LOCAL_BUSINESS = "localBusiness"
    EVENTS = "events"


async def _church_by_slug(session: AsyncSession, slug: str) -> Church:
    church = (await session.exec(select(Church).where(Church.slug == slug))).first()
    if church is None:
        raise NotFound("Church not found")
    return church


async def _upcoming_website_events(session: AsyncSession, church: Church, limit: int):
    result = await session.exec(
        select(Event)
        .where(
            Event.church_id == church.id,
            Event.is_published == True,  # noqa: E712
            Event.publish_to_website == True,  # noqa: E712
            Event.start_date >= utcnow(),
        )
        .order_by(Event.start_date.asc())
        .limit(limit)
    )
    return result.all()


@router.get("/sitemap")
async def sitemap(
    slug: str,
    session: AsyncSession = Depends(get_session),
):
    """XML sitemap of a church's public site"""
    church = await _church_by_slug(session, slug)

    pages = (await session.exec(
        select(WebPage)
        .where(WebPage.church_id == church.id, WebPage.is_published == True)  # noqa: E712
        .order_by(WebPage.order.asc())
    )).all()
    events = await _upcoming_website_events(session, church, limit=100)

    urls = collect_urls(church, site_base_url(church, settings.PUBLIC_SITE_URL), pages, events)
    return Response(
        content=render_sitemap(urls),
        media_type="application/xml",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.get("/structured-data")
async def structured_data(
    slug: str,
    data_type: StructuredDataType = Query(StructuredDataType.ORGANIZATION, alias="type"),
    session: AsyncSession = Depends(get_session),
):
    """JSON-LD describing a church, its place of worship or its upcoming events"""
    church = await _church_by_slug(session, slug)
    base_url = site_base_url(church, settings.PUBLIC_SITE_URL)

    if data_type == StructuredDataType.EVENTS:
        events = await _upcoming_website_events(session, church, limit=10)
        return events_schema(events, base_url)
    if data_type == StructuredDataType.LOCAL_BUSINESS:
        return place_of_worship_schema(church, base_url)
    return organization_schema(church, base_url)


@router.get("/robots")
async def robots():
    """robots.txt pointing crawlers at the sitemap"""
    sitemap_url = f"{settings.PUBLIC_SITE_URL}{settings.API_V1_PREFIX}/seo/sitemap"
    return Response(
        content=render_robots(sitemap_url),
        media_type="text/plain",
        headers={"Cache-Control": "public, max-age=86400"},
    )
