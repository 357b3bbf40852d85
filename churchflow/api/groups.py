"""
Groups API endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, SQLModel
from typing import List, Optional
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import Conflict, NotFound, ValidationFailed
from churchflow.core.scope import ChurchScope
from churchflow.models import Group, GroupCategory, GroupMember, Member

logger = structlog.get_logger(__name__)
router = APIRouter()


class GroupCreate(SQLModel):
    """Schema for creating a group"""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category: GroupCategory = GroupCategory.SMALL_GROUP
    leader_id: Optional[uuid.UUID] = None
    location: Optional[str] = None
    meeting_day: Optional[str] = None
    meeting_time: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    is_public: bool = True
    is_active: bool = True


class GroupUpdate(SQLModel):
    """Schema for updating a group"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[GroupCategory] = None
    leader_id: Optional[uuid.UUID] = None
    location: Optional[str] = None
    meeting_day: Optional[str] = None
    meeting_time: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    is_public: Optional[bool] = None
    is_active: Optional[bool] = None


class GroupMemberAdd(SQLModel):
    member_id: uuid.UUID
    role: str = Field(default="MEMBER", max_length=50)


ALREADY_IN_GROUP = "Member is already in this group"


@router.get("/", response_model=List[Group])
async def list_groups(
    category: Optional[GroupCategory] = None,
    active_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List groups of the church"""
    criteria = []
    if category:
        criteria.append(Group.category == category)
    if active_only:
        criteria.append(Group.is_active == True)  # noqa: E712

    return await scope.list(
        Group,
        *criteria,
        order_by=(Group.name.asc(),),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=Group, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create a group"""
    if group_data.leader_id is not None:
        await scope.get(Member, group_data.leader_id, "Leader")

    async with scope.atomic():
        group = scope.add(Group(**group_data.model_dump()))

    logger.info(f"Group created: {group.id}")
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "Group",
        group.id,
        {"name": group.name},
    )
    return group


@router.get("/{group_id}", response_model=Group)
async def get_group(
    group_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a group"""
    return await scope.get(Group, group_id, "Group")


@router.patch("/{group_id}", response_model=Group)
async def update_group(
    group_id: uuid.UUID,
    group_update: GroupUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a group"""
    changes = group_update.model_dump(exclude_unset=True)
    if changes.get("leader_id") is not None:
        await scope.get(Member, changes["leader_id"], "Leader")

    async with scope.atomic():
        group = await scope.update(Group, group_id, changes, "Group")

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Group",
        group.id,
        {"updated_fields": sorted(changes)},
    )
    return group


@router.delete("/{group_id}")
async def delete_group(
    group_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a group with its memberships; its events are kept"""
    async with scope.atomic():
        group = await scope.delete(Group, group_id, "Group")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "Group",
        group_id,
        {"name": group.name},
    )
    return {"success": True}


@router.get("/{group_id}/members", response_model=List[GroupMember])
async def list_group_members(
    group_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    await scope.get(Group, group_id, "Group")
    return await scope.list(
        GroupMember,
        GroupMember.group_id == group_id,
        order_by=(GroupMember.joined_at.asc(),),
        limit=None,
    )


@router.post("/{group_id}/members", response_model=GroupMember, status_code=status.HTTP_201_CREATED)
async def add_group_member(
    group_id: uuid.UUID,
    data: GroupMemberAdd,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Add a member to a group"""
    group = await scope.get(Group, group_id, "Group")
    member = await scope.get(Member, data.member_id, "Member")

    if await scope.find(GroupMember, GroupMember.group_id == group.id, GroupMember.member_id == member.id):
        raise Conflict(ALREADY_IN_GROUP)
    if group.capacity is not None:
        if await scope.count(GroupMember, GroupMember.group_id == group.id) >= group.capacity:
            raise ValidationFailed("Group is full")

    try:
        async with scope.atomic():
            membership = scope.add(GroupMember(group_id=group.id, member_id=member.id, role=data.role))
    except IntegrityError:
        raise Conflict(ALREADY_IN_GROUP)

    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "GroupMember",
        membership.id,
        {"group": group.name, "member": f"{member.first_name} {member.last_name}"},
    )
    return membership


@router.delete("/{group_id}/members/{member_id}")
async def remove_group_member(
    group_id: uuid.UUID,
    member_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Remove a member from a group"""
    membership = await scope.find(GroupMember, GroupMember.group_id == group_id, GroupMember.member_id == member_id)
    if membership is None:
        raise NotFound("Group member not found")

    async with scope.atomic():
        await scope.delete(GroupMember, membership.id, "Group member")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "GroupMember",
        membership.id,
        {"group_id": str(group_id), "member_id": str(member_id)},
    )
    return {"success": True}
