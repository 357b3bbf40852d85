"""
Church API endpoints - onboarding and settings
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.clock import utcnow
from churchflow.core.database import get_session
from churchflow.core.dependencies import (
    get_activity_recorder,
    get_church_context,
    get_current_user_id,
    require_action,
)
from churchflow.core.errors import Conflict, NoTenant, ValidationFailed
from churchflow.core.permissions import SensitiveAction
from churchflow.core.scope import reject_nulls
from churchflow.core.tenancy import ChurchContext, find_membership
from churchflow.models import Church, ChurchRole
from churchflow.services.churches import create_church, tier_for_attendance

logger = structlog.get_logger(__name__)
router = APIRouter()


class ChurchCreate(SQLModel):
    """Onboarding form"""
    church_name: str
    denomination: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    average_attendance: Optional[str] = None


class ChurchUpdate(SQLModel):
    """Settings a church administrator may change; the slug is not one of them"""
    name: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    logo: Optional[str] = None
    primary_color: Optional[str] = None
    enabled_modules: Optional[List[str]] = None


async def _load_church(session: AsyncSession, church_id: uuid.UUID) -> Church:
    church = await session.get(Church, church_id)
    if church is None:
        raise NoTenant()
    return church


@router.get("/", response_model=Church)
async def get_church(
    context: ChurchContext = Depends(get_church_context),
    session: AsyncSession = Depends(get_session)
):
    """Get the current user's church"""
    return await _load_church(session, context.church_id)


@router.post("/", response_model=Church, status_code=status.HTTP_201_CREATED)
async def onboard_church(
    church_data: ChurchCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create a church for a signed-in user who does not have one yet"""
    name = church_data.church_name.strip()
    if not name:
        raise ValidationFailed("Church name is required")

    if await find_membership(session, user_id):
        raise Conflict("You already belong to a church")

    profile = {
        "description": church_data.denomination,
        "website": church_data.website,
        "phone": church_data.phone,
        "email": church_data.email,
        "address": church_data.address,
        "city": church_data.city,
        "state": church_data.state,
        "postal_code": church_data.zip_code,
    }
    if church_data.country:
        profile["country"] = church_data.country
    if church_data.timezone:
        profile["timezone"] = church_data.timezone

    try:
        church = await create_church(
            session,
            owner_id=user_id,
            name=name,
            tier=tier_for_attendance(church_data.average_attendance),
            **profile,
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("You already belong to a church")
    except Exception:
        await session.rollback()
        raise

    await recorder.record(
        ChurchContext(user_id=user_id, church_id=church.id, role=ChurchRole.OWNER),
        ActivityAction.CHURCH_CREATED,
        "Church",
        church.id,
        {"church_name": name},
    )
    return church


@router.patch("/", response_model=Church)
async def update_church(
    church_update: ChurchUpdate,
    context: ChurchContext = Depends(require_action(SensitiveAction.CHURCH_SETTINGS_UPDATE)),
    session: AsyncSession = Depends(get_session),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update church settings (owners and admins only)"""
    church = await _load_church(session, context.church_id)

    changes = church_update.model_dump(exclude_unset=True)
    reject_nulls(Church, changes)
    for key, value in changes.items():
        setattr(church, key, value)
    church.updated_at = utcnow()

    session.add(church)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    await session.refresh(church)
    logger.info(f"Church updated: {church.id}")

    await recorder.record(
        context,
        ActivityAction.UPDATE,
        "Church",
        church.id,
        {"updated_fields": sorted(changes)},
    )
    return church
