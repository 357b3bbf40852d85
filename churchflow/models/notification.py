"""
Notification model - in-app notifications
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid

from churchflow.core.clock import utcnow


class Notification(SQLModel, table=True):
    """Notification addressed to one user of a church"""

    __tablename__ = "notifications"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    title: str = Field(max_length=255)
    message: str
    url: Optional[str] = Field(default=None, max_length=500)

    is_read: bool = Field(default=False, index=True)
    read_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
