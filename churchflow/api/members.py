"""
Members API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, SQLModel
from typing import List, Optional
from datetime import date
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import Conflict
from churchflow.core.scope import ChurchScope
from churchflow.models import Member, MembershipStatus

logger = structlog.get_logger(__name__)
router = APIRouter()


class MemberCreate(SQLModel):
    """Schema for creating a member"""
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    photo: Optional[str] = None
    notes: Optional[str] = None
    membership_status: MembershipStatus = MembershipStatus.VISITOR
    joined_at: Optional[date] = None


class MemberUpdate(SQLModel):
    """Schema for updating a member"""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    photo: Optional[str] = None
    notes: Optional[str] = None
    membership_status: Optional[MembershipStatus] = None
    joined_at: Optional[date] = None


DUPLICATE_EMAIL = "A member with this email already exists"


async def _ensure_email_free(scope: ChurchScope, email: Optional[str], member_id: Optional[uuid.UUID] = None):
    if not email:
        return
    criteria = [Member.email == email]
    if member_id is not None:
        criteria.append(Member.id != member_id)
    if await scope.find(Member, *criteria):
        raise Conflict(DUPLICATE_EMAIL)


@router.get("/", response_model=List[Member])
async def list_members(
    search: Optional[str] = None,
    membership_status: Optional[MembershipStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List members of the church"""
    criteria = []
    if search:
        pattern = f"%{search}%"
        criteria.append(or_(
            Member.first_name.ilike(pattern),
            Member.last_name.ilike(pattern),
            Member.email.ilike(pattern),
        ))
    if membership_status:
        criteria.append(Member.membership_status == membership_status)

    return await scope.list(
        Member,
        *criteria,
        order_by=(Member.last_name.asc(), Member.first_name.asc()),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=Member, status_code=status.HTTP_201_CREATED)
async def create_member(
    member_data: MemberCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Add a member to the directory"""
    await _ensure_email_free(scope, member_data.email)

    try:
        async with scope.atomic():
            member = scope.add(Member(**member_data.model_dump()))
    except IntegrityError:
        raise Conflict(DUPLICATE_EMAIL)

    logger.info(f"Member created: {member.id}")
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "Member",
        member.id,
        {"name": f"{member.first_name} {member.last_name}"},
    )
    return member


@router.get("/{member_id}", response_model=Member)
async def get_member(
    member_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a member"""
    return await scope.get(Member, member_id, "Member")


@router.patch("/{member_id}", response_model=Member)
async def update_member(
    member_id: uuid.UUID,
    member_update: MemberUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a member"""
    changes = member_update.model_dump(exclude_unset=True)
    await _ensure_email_free(scope, changes.get("email"), member_id)

    try:
        async with scope.atomic():
            member = await scope.update(Member, member_id, changes, "Member")
    except IntegrityError:
        raise Conflict(DUPLICATE_EMAIL)

    logger.info(f"Member updated: {member_id}")
    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Member",
        member.id,
        {"updated_fields": sorted(changes)},
    )
    return member


@router.delete("/{member_id}")
async def delete_member(
    member_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a member along with their group memberships, attendance and check-ins"""
    async with scope.atomic():
        member = await scope.delete(Member, member_id, "Member")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "Member",
        member_id,
        {"name": f"{member.first_name} {member.last_name}"},
    )
    return {"success": True}
