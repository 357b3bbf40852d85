"""
Push notification API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Field, SQLModel
from typing import List, Optional
import structlog
import uuid

from churchflow.core.activity import ActivityAction, ActivityRecorder
from churchflow.core.dependencies import get_activity_recorder, get_scope, require_action
from churchflow.core.errors import NotFound, ValidationFailed
from churchflow.core.permissions import SensitiveAction
from churchflow.core.scope import ChurchScope
from churchflow.core.tenancy import ChurchContext
from churchflow.models import ChurchUser, Notification, PushSubscription
from churchflow.services.push import PushGateway, get_push_gateway

logger = structlog.get_logger(__name__)
router = APIRouter()


class SubscriptionKeys(SQLModel):
    p256dh: str
    auth: str


class SubscriptionCreate(SQLModel):
    """Browser PushSubscription as serialized by the service worker"""
    endpoint: str = Field(min_length=1, max_length=1000)
    keys: SubscriptionKeys
    user_agent: Optional[str] = None


class PushMessage(SQLModel):
    """Broadcast to the whole church, or to ``user_ids`` within it"""
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    url: Optional[str] = None
    user_ids: Optional[List[uuid.UUID]] = None


class PushResult(SQLModel):
    recipients: int
    delivered: int


@router.post("/subscribe", response_model=PushSubscription, status_code=status.HTTP_201_CREATED)
async def subscribe(
    data: SubscriptionCreate,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Register this browser for push; subscribing an endpoint again refreshes its keys"""
    subscription = await scope.find(
        PushSubscription,
        PushSubscription.endpoint == data.endpoint,
        PushSubscription.user_id == scope.context.user_id,
    )
    keys = {
        "p256dh": data.keys.p256dh,
        "auth": data.keys.auth,
        "user_agent": data.user_agent,
    }

    action = ActivityAction.CREATE if subscription is None else ActivityAction.UPDATE
    async with scope.atomic():
        if subscription is None:
            subscription = scope.add(PushSubscription(
                user_id=scope.context.user_id,
                endpoint=data.endpoint,
                **keys,
            ))
        else:
            subscription = await scope.update(PushSubscription, subscription.id, keys, "Subscription")

    logger.info("Push subscription saved", user_id=str(scope.context.user_id))
    await recorder.record(
        scope.context,
        action,
        "PushSubscription",
        subscription.id,
        {"user_agent": subscription.user_agent},
    )
    return subscription


@router.delete("/subscribe")
async def unsubscribe(
    endpoint: str,
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
):
    """Remove one of the caller's subscriptions"""
    subscription = await scope.find(
        PushSubscription,
        PushSubscription.endpoint == endpoint,
        PushSubscription.user_id == scope.context.user_id,
    )
    if subscription is None:
        raise NotFound("Subscription not found")

    async with scope.atomic():
        await scope.delete(PushSubscription, subscription.id, "Subscription")

    await recorder.record(
        scope.context,
        ActivityAction.DELETE,
        "PushSubscription",
        subscription.id,
    )
    return {"success": True}


@router.post("/send", response_model=PushResult)
async def send_push(
    data: PushMessage,
    context: ChurchContext = Depends(require_action(SensitiveAction.PUSH_BROADCAST)),
    scope: ChurchScope = Depends(get_scope),
    recorder: ActivityRecorder = Depends(get_activity_recorder),
    gateway: PushGateway = Depends(get_push_gateway),
):
    """Notify church users in-app and through their push subscriptions (owners and admins)"""
    criteria = []
    if data.user_ids is not None:
        if not data.user_ids:
            raise ValidationFailed("user_ids must not be empty")
        criteria.append(ChurchUser.user_id.in_(data.user_ids))

    memberships = await scope.list(ChurchUser, *criteria, limit=None)
    recipients = [membership.user_id for membership in memberships]
    if not recipients:
        raise NotFound("No recipients found")

    async with scope.atomic():
        for user_id in recipients:
            scope.add(Notification(
                user_id=user_id,
                title=data.title,
                message=data.message,
                url=data.url,
            ))

    subscriptions = await scope.list(
        PushSubscription,
        PushSubscription.user_id.in_(recipients),
        limit=None,
    )
    delivered = await gateway.send(
        subscriptions,
        {"title": data.title, "body": data.message, "url": data.url},
    )

    logger.info("Push sent", recipients=len(recipients), delivered=delivered)
    await recorder.record(
        context,
        ActivityAction.PUSH_SENT,
        "Notification",
        None,
        {"title": data.title, "recipients": len(recipients), "delivered": delivered},
    )
    return PushResult(recipients=len(recipients), delivered=delivered)
