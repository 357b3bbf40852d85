"""
Website pages API endpoints

Page slugs are unique within a church. A slug given by the client is
normalized and must be free; without one, a slug is allocated from the
title with a numeric suffix on collision.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Any, Dict, List, Optional
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.database import get_session
from churchflow.core.dependencies import get_activity_recorder, get_scope, require_action
from churchflow.core.errors import Conflict, NotFound, ValidationFailed
from churchflow.core.identifiers import persist_unique, slug_candidates, slugify
from churchflow.core.permissions import SensitiveAction
from churchflow.core.scope import ChurchScope
from churchflow.core.tenancy import ChurchContext
from churchflow.models import Church, WebPage

logger = structlog.get_logger(__name__)
router = APIRouter()

SLUG_TAKEN = "A page with this slug already exists"


class PageCreate(SQLModel):
    """Schema for creating a page"""
    title: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = None
    template: str = "content"
    content: Dict[str, Any] = {}
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_published: bool = False
    is_home_page: bool = False
    show_in_nav: bool = True
    order: Optional[int] = None


class PageUpdate(SQLModel):
    """Schema for updating a page"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = None
    template: Optional[str] = None
    content: Optional[Dict[str, Any]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_published: Optional[bool] = None
    is_home_page: Optional[bool] = None
    show_in_nav: Optional[bool] = None
    order: Optional[int] = None


def normalize_page_slug(value: str) -> str:
    slug = slugify(value)
    if not slug:
        raise ValidationFailed("Slug must contain at least one letter or digit")
    return slug


async def _page_slug_taken(scope: ChurchScope, slug: str, page_id: Optional[uuid.UUID] = None) -> bool:
    criteria = [WebPage.slug == slug]
    if page_id is not None:
        criteria.append(WebPage.id != page_id)
    return await scope.find(WebPage, *criteria) is not None


async def _clear_home_page(scope: ChurchScope):
    await scope.session.exec(
        update(WebPage)
        .where(WebPage.church_id == scope.church_id, WebPage.is_home_page == True)  # noqa: E712
        .values(is_home_page=False)
    )


async def _published_church(session: AsyncSession, church_slug: str) -> Church:
    church = (await session.exec(select(Church).where(Church.slug == church_slug))).first()
    if church is None:
        raise NotFound("Church not found")
    return church


@router.get("/public/{church_slug}", response_model=List[WebPage])
async def list_public_pages(
    church_slug: str,
    session: AsyncSession = Depends(get_session),
):
    """Published pages of a church's website; no authentication"""
    church = await _published_church(session, church_slug)
    result = await session.exec(
        select(WebPage)
        .where(WebPage.church_id == church.id, WebPage.is_published == True)  # noqa: E712
        .order_by(WebPage.order.asc(), WebPage.title.asc())
    )
    return result.all()


@router.get("/public/{church_slug}/{page_slug}", response_model=WebPage)
async def get_public_page(
    church_slug: str,
    page_slug: str,
    session: AsyncSession = Depends(get_session),
):
    church = await _published_church(session, church_slug)
    result = await session.exec(
        select(WebPage).where(
            WebPage.church_id == church.id,
            WebPage.slug == page_slug.strip("/"),
            WebPage.is_published == True,  # noqa: E712
        )
    )
    page = result.first()
    if page is None:
        raise NotFound("Page not found")
    return page


@router.get("/", response_model=List[WebPage])
async def list_pages(
    published: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List the church's pages, drafts included"""
    criteria = []
    if published is not None:
        criteria.append(WebPage.is_published == published)

    return await scope.list(
        WebPage,
        *criteria,
        order_by=(WebPage.order.asc(), WebPage.title.asc()),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=WebPage, status_code=status.HTTP_201_CREATED)
async def create_page(
    page_data: PageCreate,
    context: ChurchContext = Depends(require_action(SensitiveAction.PAGE_CREATE)),
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create a page (owners and admins); without an order it goes last"""
    values = page_data.model_dump(exclude={"slug"})
    if values["order"] is None:
        result = await scope.session.exec(
            select(func.max(WebPage.order)).where(WebPage.church_id == scope.church_id)
        )
        last = result.one()
        values["order"] = 0 if last is None else last + 1

    try:
        async with scope.atomic():
            if page_data.is_home_page:
                await _clear_home_page(scope)

            if page_data.slug is not None:
                slug = normalize_page_slug(page_data.slug)
                if await _page_slug_taken(scope, slug):
                    raise Conflict(SLUG_TAKEN)
                page = scope.add(WebPage(**values, slug=slug))
            else:
                page = await persist_unique(
                    scope.session,
                    lambda slug: scope.add(WebPage(**values, slug=slug)),
                    slug_candidates(slugify(page_data.title, fallback="page")),
                    lambda slug: _page_slug_taken(scope, slug),
                    kind="page_slug",
                )
    except IntegrityError:
        raise Conflict(SLUG_TAKEN)

    logger.info(f"Page created: {page.id}", slug=page.slug)
    await recorder.record(
        context,
        ActivityAction.CREATE,
        "WebPage",
        page.id,
        {"title": page.title, "slug": page.slug},
    )
    return page


@router.get("/{page_id}", response_model=WebPage)
async def get_page(
    page_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a page"""
    return await scope.get(WebPage, page_id, "Page")


@router.patch("/{page_id}", response_model=WebPage)
async def update_page(
    page_id: uuid.UUID,
    page_update: PageUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a page"""
    changes = page_update.model_dump(exclude_unset=True)
    if changes.get("slug") is not None:
        changes["slug"] = normalize_page_slug(changes["slug"])
        if await _page_slug_taken(scope, changes["slug"], page_id):
            raise Conflict(SLUG_TAKEN)
    else:
        changes.pop("slug", None)

    try:
        async with scope.atomic():
            if changes.get("is_home_page"):
                await _clear_home_page(scope)
            page = await scope.update(WebPage, page_id, changes, "Page")
    except IntegrityError:
        raise Conflict(SLUG_TAKEN)

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "WebPage",
        page.id,
        {"updated_fields": sorted(changes)},
    )
    return page


@router.delete("/{page_id}")
async def delete_page(
    page_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a page"""
    async with scope.atomic():
        page = await scope.delete(WebPage, page_id, "Page")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "WebPage",
        page_id,
        {"title": page.title, "slug": page.slug},
    )
    return {"success": True}
