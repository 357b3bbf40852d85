"""
Check-in API endpoints

A member checks in at most once per event per day. Child check-ins get a
pickup security code unique within the church for that day, and every
check-in also writes the matching attendance row.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, SQLModel
from typing import List, Optional
from datetime import date
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.clock import utcnow
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import Conflict, NotFound, ValidationFailed
from churchflow.core.identifiers import code_candidates, persist_unique
from churchflow.core.scope import ChurchScope
from churchflow.models import Attendance, CheckIn, CheckInMethod, Event, Member

logger = structlog.get_logger(__name__)
router = APIRouter()

ALREADY_CHECKED_IN = "Member is already checked in to this event today"


class CheckInCreate(SQLModel):
    """Schema for checking a member in"""
    member_id: uuid.UUID
    event_id: Optional[uuid.UUID] = None
    event_code: Optional[str] = Field(default=None, max_length=16)
    check_in_method: CheckInMethod = CheckInMethod.MANUAL
    is_child_check_in: bool = False
    parent_name: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = None


class CheckInUpdate(SQLModel):
    """Schema for correcting a check-in"""
    notes: Optional[str] = None
    parent_name: Optional[str] = Field(default=None, max_length=200)
    check_in_method: Optional[CheckInMethod] = None


class CheckOutRequest(SQLModel):
    """Schema for checking out; children need the pickup code"""
    security_code: Optional[str] = None


async def _resolve_event(scope: ChurchScope, data: CheckInCreate) -> Optional[Event]:
    if data.event_id is not None:
        event = await scope.get(Event, data.event_id, "Event")
    elif data.event_code:
        event = await scope.find(Event, Event.check_in_code == data.event_code.strip().upper())
        if event is None:
            raise NotFound("Event not found")
    else:
        return None

    if not event.enable_check_in:
        raise ValidationFailed("Check-in is not enabled for this event")
    return event


async def _already_checked_in(scope: ChurchScope, member_id: uuid.UUID, event_id: Optional[uuid.UUID], day: date) -> bool:
    event_match = CheckIn.event_id == event_id if event_id is not None else CheckIn.event_id.is_(None)
    existing = await scope.find(
        CheckIn,
        CheckIn.member_id == member_id,
        event_match,
        CheckIn.check_in_date == day,
    )
    return existing is not None


@router.get("/", response_model=List[CheckIn])
async def list_check_ins(
    event_id: Optional[uuid.UUID] = None,
    check_in_date: Optional[date] = None,
    is_child_check_in: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List check-ins, newest first"""
    criteria = []
    if event_id:
        criteria.append(CheckIn.event_id == event_id)
    if check_in_date:
        criteria.append(CheckIn.check_in_date == check_in_date)
    if is_child_check_in is not None:
        criteria.append(CheckIn.is_child_check_in == is_child_check_in)

    return await scope.list(
        CheckIn,
        *criteria,
        order_by=(CheckIn.check_in_time.desc(),),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=CheckIn, status_code=status.HTTP_201_CREATED)
async def create_check_in(
    check_in_data: CheckInCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Check a member in"""
    member = await scope.get(Member, check_in_data.member_id, "Member")
    event = await _resolve_event(scope, check_in_data)
    event_id = event.id if event else None

    now = utcnow()
    today = now.date()
    if await _already_checked_in(scope, member.id, event_id, today):
        raise Conflict(ALREADY_CHECKED_IN)

    values = check_in_data.model_dump(exclude={"event_id", "event_code"})
    values.update(event_id=event_id, check_in_time=now, check_in_date=today)

    async def security_code_taken(code: str) -> bool:
        taken = await scope.find(CheckIn, CheckIn.check_in_date == today, CheckIn.security_code == code)
        return taken is not None

    try:
        async with scope.atomic():
            if check_in_data.is_child_check_in:
                check_in = await persist_unique(
                    scope.session,
                    lambda code: scope.add(CheckIn(**values, security_code=code)),
                    code_candidates(),
                    security_code_taken,
                    kind="child_security_code",
                )
            else:
                check_in = scope.add(CheckIn(**values))

            scope.add(Attendance(
                member_id=member.id,
                event_id=event_id,
                attendance_date=today,
                check_in_time=now,
            ))
    except IntegrityError:
        raise Conflict(ALREADY_CHECKED_IN)

    logger.info(f"Member checked in: {member.id}", event_id=str(event_id), child=check_in.is_child_check_in)
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "CheckIn",
        check_in.id,
        {
            "member": f"{member.first_name} {member.last_name}",
            "event": event.title if event else None,
        },
    )
    return check_in


@router.get("/{check_in_id}", response_model=CheckIn)
async def get_check_in(
    check_in_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a check-in"""
    return await scope.get(CheckIn, check_in_id, "Check-in")


@router.patch("/{check_in_id}", response_model=CheckIn)
async def update_check_in(
    check_in_id: uuid.UUID,
    check_in_update: CheckInUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update notes or pickup details"""
    changes = check_in_update.model_dump(exclude_unset=True)

    async with scope.atomic():
        check_in = await scope.update(CheckIn, check_in_id, changes, "Check-in")

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "CheckIn",
        check_in.id,
        {"updated_fields": sorted(changes)},
    )
    return check_in


@router.patch("/{check_in_id}/checkout", response_model=CheckIn)
async def check_out(
    check_in_id: uuid.UUID,
    request: CheckOutRequest,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Record pickup or departure"""
    check_in = await scope.get(CheckIn, check_in_id, "Check-in")
    if check_in.check_out_time is not None:
        raise Conflict("Already checked out")
    if check_in.is_child_check_in:
        supplied = (request.security_code or "").strip().upper()
        if supplied != check_in.security_code:
            raise ValidationFailed("Security code does not match")

    async with scope.atomic():
        check_in = await scope.update(
            CheckIn,
            check_in_id,
            {"check_out_time": utcnow(), "checked_out_by_id": scope.context.user_id},
            "Check-in",
        )

    await recorder.record(
        scope.context,
        ActivityAction.CHECK_OUT,
        "CheckIn",
        check_in.id,
    )
    return check_in


@router.delete("/{check_in_id}")
async def delete_check_in(
    check_in_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a check-in"""
    async with scope.atomic():
        check_in = await scope.delete(CheckIn, check_in_id, "Check-in")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "CheckIn",
        check_in_id,
        {"member_id": str(check_in.member_id)},
    )
    return {"success": True}
