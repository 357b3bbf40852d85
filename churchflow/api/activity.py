"""
Activity log API endpoints
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import uuid

from churchflow.core.dependencies import get_scope
from churchflow.core.scope import ChurchScope
from churchflow.models import ActivityLog

router = APIRouter()


@router.get("/", response_model=List[ActivityLog])
async def list_activity(
    entity_type: Optional[str] = None,
    entity_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    scope: ChurchScope = Depends(get_scope),
):
    """Audit trail of the caller's church, newest first"""
    criteria = []
    if entity_type:
        criteria.append(ActivityLog.entity_type == entity_type)
    if entity_id:
        criteria.append(ActivityLog.entity_id == entity_id)
    if user_id:
        criteria.append(ActivityLog.user_id == user_id)

    return await scope.list(
        ActivityLog,
        *criteria,
        order_by=(ActivityLog.created_at.desc(),),
        offset=skip,
        limit=limit,
    )
