"""
Prayer requests API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import update
from sqlmodel import Field, SQLModel
from typing import List, Optional
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.clock import utcnow
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.scope import ChurchScope
from churchflow.models import Member, PrayerRequest, PrayerRequestStatus

logger = structlog.get_logger(__name__)
router = APIRouter()


class PrayerRequestCreate(SQLModel):
    """Schema for submitting a prayer request"""
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    member_id: Optional[uuid.UUID] = None
    requester_name: Optional[str] = None
    is_anonymous: bool = False
    is_public: bool = False


class PrayerRequestUpdate(SQLModel):
    """Schema for updating a prayer request"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    requester_name: Optional[str] = None
    is_anonymous: Optional[bool] = None
    is_public: Optional[bool] = None
    status: Optional[PrayerRequestStatus] = None


@router.get("/", response_model=List[PrayerRequest])
async def list_prayer_requests(
    request_status: Optional[PrayerRequestStatus] = Query(None, alias="status"),
    public_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List prayer requests, newest first"""
    criteria = []
    if request_status:
        criteria.append(PrayerRequest.status == request_status)
    if public_only:
        criteria.append(PrayerRequest.is_public == True)  # noqa: E712

    return await scope.list(
        PrayerRequest,
        *criteria,
        order_by=(PrayerRequest.created_at.desc(),),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=PrayerRequest, status_code=status.HTTP_201_CREATED)
async def create_prayer_request(
    request_data: PrayerRequestCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Submit a prayer request"""
    if request_data.member_id is not None:
        await scope.get(Member, request_data.member_id, "Member")

    async with scope.atomic():
        prayer_request = scope.add(PrayerRequest(**request_data.model_dump()))

    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "PrayerRequest",
        prayer_request.id,
        {"title": prayer_request.title},
    )
    return prayer_request


@router.get("/{request_id}", response_model=PrayerRequest)
async def get_prayer_request(
    request_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a prayer request"""
    return await scope.get(PrayerRequest, request_id, "Prayer request")


@router.patch("/{request_id}", response_model=PrayerRequest)
async def update_prayer_request(
    request_id: uuid.UUID,
    request_update: PrayerRequestUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a prayer request; marking it answered stamps ``answered_at``"""
    changes = request_update.model_dump(exclude_unset=True)
    if changes.get("status") == PrayerRequestStatus.ANSWERED:
        changes["answered_at"] = utcnow()
    elif "status" in changes:
        changes["answered_at"] = None

    async with scope.atomic():
        prayer_request = await scope.update(PrayerRequest, request_id, changes, "Prayer request")

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "PrayerRequest",
        prayer_request.id,
        {"updated_fields": sorted(changes)},
    )
    return prayer_request


@router.post("/{request_id}/pray", response_model=PrayerRequest)
async def pray_for_request(
    request_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Count one more prayer for a request"""
    prayer_request = await scope.get(PrayerRequest, request_id, "Prayer request")

    async with scope.atomic():
        await scope.session.exec(
            update(PrayerRequest)
            .where(PrayerRequest.id == request_id, PrayerRequest.church_id == scope.church_id)
            .values(prayer_count=PrayerRequest.prayer_count + 1)
        )

    await scope.session.refresh(prayer_request)
    await recorder.record(
        scope.context,
        ActivityAction.PRAYED,
        "PrayerRequest",
        prayer_request.id,
        {"prayer_count": prayer_request.prayer_count},
    )
    return prayer_request


@router.delete("/{request_id}")
async def delete_prayer_request(
    request_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a prayer request"""
    async with scope.atomic():
        prayer_request = await scope.delete(PrayerRequest, request_id, "Prayer request")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "PrayerRequest",
        request_id,
        {"title": prayer_request.title},
    )
    return {"success": True}
