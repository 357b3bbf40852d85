"""
PushSubscription model - browser push endpoints per user
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import UniqueConstraint
from datetime import datetime
from typing import Optional
import uuid

from churchflow.core.clock import utcnow


class PushSubscription(SQLModel, table=True):
    """Web push subscription registered by a church user.

    One row per user and endpoint; a browser shared by users of different
    churches holds one row in each church.
    """

    __tablename__ = "push_subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "endpoint", name="uq_push_subscriptions_user_endpoint"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    endpoint: str = Field(max_length=1000)
    p256dh: str = Field(max_length=255)
    auth: str = Field(max_length=255)
    user_agent: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
