"""
Volunteers API endpoints

Volunteer roles are the positions a church staffs; volunteers are members
registered to serve, at most once each.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, SQLModel
from typing import Any, Dict, List, Optional
from datetime import date
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import Conflict
from churchflow.core.scope import ChurchScope
from churchflow.models import Member, Volunteer, VolunteerRole

logger = structlog.get_logger(__name__)
router = APIRouter()

ALREADY_VOLUNTEER = "This member is already registered as a volunteer"
ROLE_EXISTS = "A role with this name already exists"


class VolunteerRoleCreate(SQLModel):
    """Schema for creating a volunteer role"""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    ministry: Optional[str] = Field(default=None, max_length=255)
    requires_background_check: bool = False
    required_training: List[str] = []


class VolunteerRoleUpdate(SQLModel):
    """Schema for updating a volunteer role"""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    ministry: Optional[str] = None
    requires_background_check: Optional[bool] = None
    required_training: Optional[List[str]] = None
    is_active: Optional[bool] = None


class VolunteerCreate(SQLModel):
    """Schema for registering a member as a volunteer"""
    member_id: uuid.UUID
    skills: List[str] = []
    availability: Optional[Dict[str, Any]] = None
    preferred_roles: List[str] = []
    background_check: bool = False
    background_check_date: Optional[date] = None
    training_completed: List[str] = []
    notes: Optional[str] = None


class VolunteerUpdate(SQLModel):
    """Schema for updating a volunteer; the member is fixed"""
    skills: Optional[List[str]] = None
    availability: Optional[Dict[str, Any]] = None
    preferred_roles: Optional[List[str]] = None
    background_check: Optional[bool] = None
    background_check_date: Optional[date] = None
    training_completed: Optional[List[str]] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


async def _role_name_taken(scope: ChurchScope, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    """Role names compare case-insensitively within a church"""
    criteria = [func.lower(VolunteerRole.name) == name.strip().lower()]
    if exclude_id is not None:
        criteria.append(VolunteerRole.id != exclude_id)
    return await scope.find(VolunteerRole, *criteria) is not None


# Roles

@router.get("/roles", response_model=List[VolunteerRole])
async def list_roles(
    active_only: bool = False,
    scope: ChurchScope = Depends(get_scope),
):
    """List volunteer roles by name"""
    criteria = [VolunteerRole.is_active == True] if active_only else []  # noqa: E712
    return await scope.list(
        VolunteerRole,
        *criteria,
        order_by=(VolunteerRole.name.asc(),),
        limit=None,
    )


@router.post("/roles", response_model=VolunteerRole, status_code=status.HTTP_201_CREATED)
async def create_role(
    role_data: VolunteerRoleCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create a volunteer role"""
    name = role_data.name.strip()
    if await _role_name_taken(scope, name):
        raise Conflict(ROLE_EXISTS)

    try:
        async with scope.atomic():
            role = scope.add(VolunteerRole(**role_data.model_dump(exclude={"name"}), name=name))
    except IntegrityError:
        raise Conflict(ROLE_EXISTS)

    logger.info(f"Volunteer role created: {role.id}")
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "VolunteerRole",
        role.id,
        {"name": role.name},
    )
    return role


@router.patch("/roles/{role_id}", response_model=VolunteerRole)
async def update_role(
    role_id: uuid.UUID,
    role_update: VolunteerRoleUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a volunteer role"""
    changes = role_update.model_dump(exclude_unset=True)
    if changes.get("name") is not None:
        changes["name"] = changes["name"].strip()
        if await _role_name_taken(scope, changes["name"], role_id):
            raise Conflict(ROLE_EXISTS)

    try:
        async with scope.atomic():
            role = await scope.update(VolunteerRole, role_id, changes, "Volunteer role")
    except IntegrityError:
        raise Conflict(ROLE_EXISTS)

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "VolunteerRole",
        role.id,
        {"updated_fields": sorted(changes)},
    )
    return role


@router.delete("/roles/{role_id}")
async def delete_role(
    role_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete a volunteer role"""
    async with scope.atomic():
        role = await scope.delete(VolunteerRole, role_id, "Volunteer role")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "VolunteerRole",
        role_id,
        {"name": role.name},
    )
    return {"success": True}


# Volunteers

@router.get("/", response_model=List[Volunteer])
async def list_volunteers(
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """List volunteers, newest first; ``search`` matches the member's name or email"""
    criteria = []
    if is_active is not None:
        criteria.append(Volunteer.is_active == is_active)
    if search:
        pattern = f"%{search.lower()}%"
        matching_members = scope.select(Member).where(
            or_(
                func.lower(Member.first_name).like(pattern),
                func.lower(Member.last_name).like(pattern),
                func.lower(Member.email).like(pattern),
            )
        ).with_only_columns(Member.id)
        criteria.append(Volunteer.member_id.in_(matching_members))

    return await scope.list(
        Volunteer,
        *criteria,
        order_by=(Volunteer.created_at.desc(),),
        offset=skip,
        limit=limit,
    )


@router.post("/", response_model=Volunteer, status_code=status.HTTP_201_CREATED)
async def create_volunteer(
    volunteer_data: VolunteerCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Register a member of this church as a volunteer"""
    member = await scope.get(Member, volunteer_data.member_id, "Member")
    if await scope.find(Volunteer, Volunteer.member_id == member.id):
        raise Conflict(ALREADY_VOLUNTEER)

    try:
        async with scope.atomic():
            volunteer = scope.add(Volunteer(**volunteer_data.model_dump()))
    except IntegrityError:
        raise Conflict(ALREADY_VOLUNTEER)

    logger.info(f"Volunteer registered: {volunteer.id}", member_id=str(member.id))
    await recorder.record(
        scope.context,
        ActivityAction.CREATE,
        "Volunteer",
        volunteer.id,
        {"member": f"{member.first_name} {member.last_name}"},
    )
    return volunteer


@router.get("/{volunteer_id}", response_model=Volunteer)
async def get_volunteer(
    volunteer_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
):
    """Get a volunteer"""
    return await scope.get(Volunteer, volunteer_id, "Volunteer")


@router.patch("/{volunteer_id}", response_model=Volunteer)
async def update_volunteer(
    volunteer_id: uuid.UUID,
    volunteer_update: VolunteerUpdate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a volunteer"""
    changes = volunteer_update.model_dump(exclude_unset=True)

    async with scope.atomic():
        volunteer = await scope.update(Volunteer, volunteer_id, changes, "Volunteer")

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Volunteer",
        volunteer.id,
        {"updated_fields": sorted(changes)},
    )
    return volunteer


@router.delete("/{volunteer_id}")
async def delete_volunteer(
    volunteer_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Remove a volunteer registration; the member stays in the directory"""
    async with scope.atomic():
        volunteer = await scope.delete(Volunteer, volunteer_id, "Volunteer")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "Volunteer",
        volunteer_id,
        {"member_id": str(volunteer.member_id)},
    )
    return {"success": True}
