"""
Event model - services, meetings and other scheduled gatherings
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from churchflow.core.clock import utcnow


class EventCategory(str, Enum):
    SERVICE = "SERVICE"
    MEETING = "MEETING"
    CLASS = "CLASS"
    YOUTH = "YOUTH"
    OUTREACH = "OUTREACH"
    SOCIAL = "SOCIAL"
    OTHER = "OTHER"


class Event(SQLModel, table=True):
    """Event model with church isolation"""

    __tablename__ = "events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    church_id: uuid.UUID = Field(foreign_key="churches.id", index=True, description="Church ID for multi-tenant isolation")
    group_id: Optional[uuid.UUID] = Field(default=None, foreign_key="groups.id", nullable=True)

    title: str = Field(nullable=False, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = Field(default=None, max_length=500)
    category: EventCategory = Field(default=EventCategory.OTHER, index=True)

    start_date: datetime = Field(index=True)
    end_date: Optional[datetime] = None
    is_all_day: bool = Field(default=False)

    # Publishing
    is_published: bool = Field(default=True)
    publish_to_website: bool = Field(default=False)

    # Check-in
    enable_check_in: bool = Field(default=False)
    check_in_code: Optional[str] = Field(
        default=None,
        unique=True,
        max_length=16,
        description="Kiosk code, unique across all churches"
    )

    # Live stream
    is_live_stream: bool = Field(default=False)
    stream_url: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
