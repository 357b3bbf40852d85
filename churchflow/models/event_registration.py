"""
Event registration model
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid

from churchflow.core.clock import utcnow


class EventRegistration(SQLModel, table=True):
    """A member signed up for an event"""

    __tablename__ = "event_registrations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    event_id: uuid.UUID = Field(foreign_key="events.id", index=True)
    member_id: Optional[uuid.UUID] = Field(default=None, foreign_key="members.id", index=True)

    guest_name: Optional[str] = Field(default=None, max_length=200)
    guest_email: Optional[str] = Field(default=None, max_length=255)
    guest_count: int = Field(default=1)

    created_at: datetime = Field(default_factory=utcnow)
