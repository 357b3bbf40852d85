"""
Notifications API endpoints - the caller's in-app notifications
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import update
from typing import List
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.clock import utcnow
from churchflow.core.dependencies import get_activity_recorder, get_scope
from churchflow.core.errors import NotFound
from churchflow.core.scope import ChurchScope
from churchflow.models import Notification

logger = structlog.get_logger(__name__)
router = APIRouter()


async def _own_notification(scope: ChurchScope, notification_id: uuid.UUID) -> Notification:
    # Another user's notification is reported as missing
    notification = await scope.find(
        Notification,
        Notification.id == notification_id,
        Notification.user_id == scope.context.user_id,
    )
    if notification is None:
        raise NotFound("Notification not found")
    return notification


@router.get("/", response_model=List[Notification])
async def list_notifications(
    unread_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    scope: ChurchScope = Depends(get_scope),
):
    """List the caller's notifications, newest first"""
    criteria = [Notification.user_id == scope.context.user_id]
    if unread_only:
        criteria.append(Notification.is_read == False)  # noqa: E712

    return await scope.list(
        Notification,
        *criteria,
        order_by=(Notification.created_at.desc(),),
        offset=skip,
        limit=limit,
    )


@router.get("/unread-count")
async def unread_count(
    scope: ChurchScope = Depends(get_scope),
):
    count = await scope.count(
        Notification,
        Notification.user_id == scope.context.user_id,
        Notification.is_read == False,  # noqa: E712
    )
    return {"count": count}


@router.post("/read-all")
async def mark_all_read(
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Mark every unread notification of the caller as read"""
    async with scope.atomic():
        result = await scope.session.exec(
            update(Notification)
            .where(
                Notification.church_id == scope.church_id,
                Notification.user_id == scope.context.user_id,
                Notification.is_read == False,  # noqa: E712
            )
            .values(is_read=True, read_at=utcnow())
        )
        updated = result.rowcount

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Notification",
        None,
        {"marked_read": updated},
    )
    return {"updated": updated}


@router.patch("/{notification_id}/read", response_model=Notification)
async def mark_read(
    notification_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Mark one notification as read"""
    await _own_notification(scope, notification_id)

    async with scope.atomic():
        notification = await scope.update(
            Notification,
            notification_id,
            {"is_read": True, "read_at": utcnow()},
            "Notification",
        )

    await recorder.record(
        scope.context,
        ActivityAction.UPDATE,
        "Notification",
        notification.id,
        {"updated_fields": ["is_read", "read_at"]},
    )
    return notification


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: uuid.UUID,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Delete one of the caller's notifications"""
    await _own_notification(scope, notification_id)

    async with scope.atomic():
        await scope.delete(Notification, notification_id, "Notification")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "Notification",
        notification_id,
    )
    return {"success": True}
