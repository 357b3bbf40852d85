"""
Push notification delivery

Delivery to browser push services is an external concern. Routers hand
subscriptions to a ``PushGateway``; the default gateway only logs, and a
deployment overrides ``get_push_gateway`` with a real one.
"""

from typing import Any, Dict, Sequence

import structlog

from churchflow.models.push_subscription import PushSubscription

logger = structlog.get_logger(__name__)


class PushGateway:
    """Delivers one payload to many subscriptions"""

    async def send(self, subscriptions: Sequence[PushSubscription], payload: Dict[str, Any]) -> int:
        """Return the number of subscriptions the payload was handed to"""
        raise NotImplementedError


class LoggingPushGateway(PushGateway):
    """Gateway used when no delivery backend is configured"""

    async def send(self, subscriptions: Sequence[PushSubscription], payload: Dict[str, Any]) -> int:
        for subscription in subscriptions:
            logger.info(
                "Push queued",
                subscription_id=str(subscription.id),
                user_id=str(subscription.user_id),
                title=payload.get("title"),
            )
        return len(subscriptions)


def get_push_gateway() -> PushGateway:
    """FastAPI dependency returning the delivery gateway"""
    return LoggingPushGateway()
