"""
Events API endpoints
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Field, SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional
from datetime import datetime
from io import BytesIO
import qrcode
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.clock import utcnow
from churchflow.core.config import get_settings
from churchflow.core.database import get_session
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import NotFound, ValidationFailed
from churchflow.core.identifiers import code_candidates, persist_unique
from churchflow.core.scope import ChurchScope
from churchflow.models import Church, Event, EventCategory, Group
from churchflow.services.calendar import render_calendar

logger = structlog.get_logger(__name__)
router = APIRouter()
settings = get_settings()


class EventCreate(SQLModel):
    """Schema for creating an event"""
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    category: EventCategory = EventCategory.OTHER
    start_date: datetime
    end_date: Optional[datetime] = None
    is_all_day: bool = False
    is_published: bool = True
    publish_to_website: bool = False
    enable_check_in: bool = False
    is_live_stream: bool = False
    stream_url: Optional[str] = None
    group_id: Optional[uuid.UUID] = None


class EventUpdate(SQLModel):
    """Schema for updating an event"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    category: Optional[EventCategory] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_all_day: Optional[bool] = None
    is_published: Optional[bool] = None
    publish_to_website: Optional[bool] = None
    enable_check_in: Optional[bool] = None
    is_live_stream: Optional[bool] = None
    stream_url: Optional[str] = None
    group_id: Optional[uuid.UUID] = None


async def check_in_code_exists(session: AsyncSession, code: str) -> bool:
    """Check-in codes are typed at kiosks without a church, so they are unique globally"""
    result = await session.exec(select(Event.id).where(Event.check_in_code == code))
    return result.first() is not None


async def _validate_refs(scope: ChurchScope, start: datetime, end: Optional[datetime], group_id: Optional[uuid.UUID]):
    if end is not None and end < start:
        raise ValidationFailed("end_date must not be before start_date")
    if group_id is not None:
        await scope.get(Group, group_id, "Group")


@router.get("/", response_model=List[Event])
async def list_events(
    upcoming: bool = False,
    category: Optional[EventCategory] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List events of the church"""
    criteria = []
    if upcoming:
        criteria.append(Event.start_date >= utcnow())
    if category:
        criteria.append(Event.category == category)

    return await scope.list(
        Event,
        *criteria,
        order_by=(Event.start_date.asc(),),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create an event; a check-in code is allocated when check-in is enabled"""
    await _validate_refs(scope, event_data.start_date, event_data.end_date, event_data.group_id)

    values = event_data.model_dump()
    async with scope.atomic():
        if event_data.enable_check_in:
            event = await persist_unique(
                scope.session,
                lambda code: scope.add(Event(**values, check_in_code=code)),
                code_candidates(),
                lambda code: check_in_code_exists(scope.session, code),
                kind="event_check_in_code",
            )
        else:
            event = scope.add(Event(**values))

    logger.info(f"Event created: {event.id}")
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "Event",
        event.id,
        {"title": event.title},
    )
    return event


@router.get("/ical")
async def events_calendar(
    slug: str,
    session: AsyncSession = Depends(get_session),
):
    """Public iCalendar feed of a church's published website events"""
    church = (await session.exec(select(Church).where(Church.slug == slug))).first()
    if church is None:
        raise NotFound("Church not found")

    events = (await session.exec(
        select(Event)
        .where(
            Event.church_id == church.id,
            Event.is_published == True,  # noqa: E712
            Event.publish_to_website == True,  # noqa: E712
        )
        .order_by(Event.start_date.asc())
    )).all()

    return Response(
        content=render_calendar(church, events),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{church.slug}-events.ics"'},
    )


@router.get("/{event_id}", response_model=Event)
async def get_event(
    event_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get an event"""
    return await scope.get(Event, event_id, "Event")


@router.get("/{event_id}/checkin-qr")
async def get_event_checkin_qr(
    event_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """PNG QR code pointing at the event's check-in page"""
    event = await scope.get(Event, event_id, "Event")
    if not event.check_in_code:
        raise NotFound("Check-in is not enabled for this event")

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(f"{settings.PUBLIC_SITE_URL}/checkin?code={event.check_in_code}")
    qr.make(fit=True)

    buffer = BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buffer, format="PNG")
    return Response(content=buffer.getvalue(), media_type="image/png")


@router.patch("/{event_id}", response_model=Event)
async def update_event(
    event_id: uuid.UUID,
    event_update: EventUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update an event; enabling check-in allocates a code if it has none"""
    changes = event_update.model_dump(exclude_unset=True)

    async with scope.atomic():
        event = await scope.update(Event, event_id, changes, "Event")
        await _validate_refs(scope, event.start_date, event.end_date, changes.get("group_id"))

        if event.enable_check_in and not event.check_in_code:
            def assign(code: str) -> Event:
                event.check_in_code = code
                return event

            await persist_unique(
                scope.session,
                assign,
                code_candidates(),
                lambda code: check_in_code_exists(scope.session, code),
                kind="event_check_in_code",
            )

    await scope.session.refresh(event)
    logger.info(f"Event updated: {event_id}")
    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Event",
        event.id,
        {"updated_fields": sorted(changes)},
    )
    return event


@router.delete("/{event_id}")
async def delete_event(
    event_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete an event with its registrations, attendance and check-ins"""
    async with scope.atomic():
        event = await scope.delete(Event, event_id, "Event")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "Event",
        event_id,
        {"title": event.title},
    )
    return {"success": True}
