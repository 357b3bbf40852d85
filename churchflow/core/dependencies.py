"""
Authentication and tenancy dependencies for FastAPI
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from sqlmodel.ext.asyncio.session import AsyncSession
import uuid
import structlog

from churchflow.core.activity import ActivityRecorder
from churchflow.core.auth import verify_token
from churchflow.core.config import get_settings
from churchflow.core.database import get_session
from churchflow.core.errors import NoTenant, Unauthenticated
from churchflow.core.permissions import SensitiveAction, authorize
from churchflow.core.scope import ChurchScope
from churchflow.core.tenancy import ChurchContext, resolve_church

logger = structlog.get_logger(__name__)
settings = get_settings()
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> uuid.UUID:
    """Get current user ID from JWT token"""
    if credentials is None:
        raise Unauthenticated()

    user_id = verify_token(credentials.credentials)
    if user_id is None:
        raise Unauthenticated()

    logger.debug(f"User authenticated: {user_id}")
    return user_id


def _requested_church_id(request: Request) -> Optional[uuid.UUID]:
    value = request.headers.get(settings.TENANT_HEADER)
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        raise NoTenant()


async def get_church_context(
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> ChurchContext:
    """Resolve the caller's church for this request"""
    return await resolve_church(session, user_id, _requested_church_id(request))


async def get_scope(
    context: ChurchContext = Depends(get_church_context),
    session: AsyncSession = Depends(get_session),
) -> ChurchScope:
    return ChurchScope(session, context)


async def get_activity_recorder(
    session: AsyncSession = Depends(get_session),
) -> ActivityRecorder:
    return ActivityRecorder(session)


def require_action(action: SensitiveAction):
    """Dependency factory that gates a route on a sensitive action"""
    async def check_action(
        context: ChurchContext = Depends(get_church_context),
    ) -> ChurchContext:
        authorize(context.role, action)
        return context
    return check_action
