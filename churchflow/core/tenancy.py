"""
Church (tenant) resolution

Every authenticated request resolves its caller to exactly one church.
The result travels through the request as an explicit ``ChurchContext``;
nothing about the resolution is cached between requests.
"""

from dataclasses import dataclass
from typing import Optional
import uuid

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from churchflow.core.errors import NoTenant
from churchflow.models.church_user import ChurchRole, ChurchUser


@dataclass(frozen=True)
class ChurchContext:
    """Resolved caller for one request"""
    user_id: uuid.UUID
    church_id: uuid.UUID
    role: ChurchRole


async def find_membership(
    session: AsyncSession,
    user_id: uuid.UUID,
    church_id: Optional[uuid.UUID] = None,
) -> Optional[ChurchUser]:
    query = select(ChurchUser).where(ChurchUser.user_id == user_id)
    if church_id is not None:
        query = query.where(ChurchUser.church_id == church_id)
    result = await session.exec(query)
    return result.first()


async def resolve_church(
    session: AsyncSession,
    user_id: uuid.UUID,
    church_id: Optional[uuid.UUID] = None,
) -> ChurchContext:
    """Resolve a user to their church and role.

    A user belongs to at most one church (``church_users.user_id`` is
    unique). ``church_id`` lets a client name the church explicitly; it
    must match the membership or the user is treated as having none.

    Raises:
        NoTenant: the user has no (matching) membership
    """
    membership = await find_membership(session, user_id, church_id)
    if membership is None:
        raise NoTenant()

    return ChurchContext(
        user_id=user_id,
        church_id=membership.church_id,
        role=ChurchRole(membership.role),
    )
